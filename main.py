"""
Sun Resource: Monthly Irradiance Chart

Queries the NREL Solar Resource API for one coordinate pair, prints the
response status and content type, reshapes the monthly averages into a
table and renders a DNI / GHI / Latitude Tilt line chart.

Usage:
    python main.py --lat 40 --lon -105
    python main.py --format pdf --show

The API key is read from NREL_API_KEY (.env or environment).
"""

import argparse
import logging
import sys
from pathlib import Path

from colorama import Fore, Style, init

from sun_resource.config import Settings
from sun_resource.errors import ConfigError, PipelineError
from sun_resource.pipeline import configure_logging, run
from sun_resource.providers.nrel import FetchResponse

init()

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description='Sun Resource - NREL monthly solar irradiance chart'
    )
    parser.add_argument('--lat', type=float, default=None,
                        help='Latitude in degrees (default: SUN_RESOURCE_LAT or 40.0)')
    parser.add_argument('--lon', type=float, default=None,
                        help='Longitude in degrees (default: SUN_RESOURCE_LON or -105.0)')
    parser.add_argument('--output-dir', type=Path, default=None,
                        help='Directory for JSON, CSV and chart output (default: outputs)')
    parser.add_argument('--format', choices=('png', 'pdf'), default='png',
                        help='Chart file format')
    parser.add_argument('--show', action='store_true',
                        help='Print the monthly table')
    return parser.parse_args(argv)


def print_banner(settings: Settings):
    """Print the run banner."""
    print(f"\n{Fore.CYAN}{'=' * 60}{Style.RESET_ALL}")
    print(f"{Fore.CYAN}   SUN RESOURCE: MONTHLY IRRADIANCE{Style.RESET_ALL}")
    print(f"{Fore.CYAN}{'=' * 60}{Style.RESET_ALL}")
    print(f"{Fore.WHITE}   [LOCATION] {settings.lat}, {settings.lon}{Style.RESET_ALL}")
    print(f"{Fore.WHITE}   [OUTPUT]   {settings.output_dir}{Style.RESET_ALL}")
    print()


def print_response(response: FetchResponse):
    """Show status code and content type before anything else happens."""
    color = Fore.GREEN if response.status_code == 200 else Fore.RED
    print(f"{Fore.YELLOW}[1/4]{Style.RESET_ALL} Requesting NREL Solar Resource...")
    print(f"      Status: {color}{response.status_code}{Style.RESET_ALL}")
    print(f"      Content-Type: {response.content_type or '(none)'}")


def main(argv=None) -> int:
    args = parse_args(argv)

    try:
        settings = Settings.from_env().with_overrides(
            lat=args.lat, lon=args.lon, output_dir=args.output_dir
        )
    except ConfigError as e:
        print(f"{Fore.RED}[ERROR]{Style.RESET_ALL} Configuration: {e}")
        return 1

    configure_logging(settings.log_level)
    print_banner(settings)

    try:
        result = run(settings, chart_format=args.format, on_response=print_response)
    except PipelineError as e:
        print(f"{Fore.RED}[ERROR]{Style.RESET_ALL} Stage '{e.stage}' failed: {e.cause}")
        logger.error(f"[main] Run failed at stage '{e.stage}'")
        return 1

    print(f"{Fore.YELLOW}[2/4]{Style.RESET_ALL} Decoded {len(result.api_response.outputs)} series "
          f"({', '.join(result.api_response.series_names)})")
    if result.api_response.sources:
        print(f"      Sources: {'; '.join(result.api_response.sources)}")
    print(f"{Fore.YELLOW}[3/4]{Style.RESET_ALL} Monthly table: "
          f"{len(result.table)} rows x {len(result.table.columns)} columns")
    if args.show:
        print()
        print(result.table.to_string(index=False))
        print()
    print(f"{Fore.YELLOW}[4/4]{Style.RESET_ALL} {result.title}")
    for kind, path in result.artifacts.items():
        print(f"      {Fore.GREEN}OK{Style.RESET_ALL} - {kind}: {path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
