"""
Sun Resource Pipeline

Runs the single linear sequence:
1. Fetch the solar resource summary (one GET, no retries)
2. Decode the JSON body into ApiResponse
3. Reshape outputs into the MonthlyTable
4. Render the chart and write artifacts

Any failure stops the run with a PipelineError naming the stage. Artifacts
are only written once every earlier stage has succeeded.
"""

import json
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import httpx
import matplotlib.pyplot as plt
import pandas as pd

from sun_resource.config import Settings
from sun_resource.decoder import ApiResponse, decode
from sun_resource.errors import (
    ConfigError,
    PipelineError,
    RenderError,
    SunResourceError,
    categorize_error,
)
from sun_resource.providers.nrel import FetchResponse, SolarResourceProvider
from sun_resource.renderer import location_title, render_chart
from sun_resource.reshaper import annual_summary, reshape

logger = logging.getLogger(__name__)

LOG_DIR = Path("logs")
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: str = "INFO", log_dir: Optional[Path] = LOG_DIR) -> None:
    """File + stdout logging. httpx is held at WARNING because it logs full URLs (with the key)."""
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_dir is not None:
        os.makedirs(log_dir, exist_ok=True)
        handlers.insert(0, logging.FileHandler(Path(log_dir) / "sun_resource.log",
                                               mode='a', encoding='utf-8'))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("matplotlib").setLevel(logging.WARNING)


def artifact_stem(lat: float, lon: float) -> str:
    """File name fragment for a coordinate pair, e.g. '40_-105'."""
    return f"{lat:g}_{lon:g}"


@dataclass
class PipelineResult:
    """Everything a run produced."""
    response: FetchResponse
    api_response: ApiResponse
    table: pd.DataFrame
    title: str
    artifacts: Dict[str, Path]


def _stage(name: str, func: Callable[..., Any], *args, **kwargs) -> Any:
    logger.info(f"[pipeline] Stage '{name}' starting")
    try:
        result = func(*args, **kwargs)
    except SunResourceError as e:
        error_type, error_msg = categorize_error(e)
        logger.error(f"[pipeline] Stage '{name}' failed: {error_type.value} - {error_msg}")
        raise PipelineError(name, e) from e
    logger.info(f"[pipeline] Stage '{name}' complete")
    return result


def _fetch(provider: SolarResourceProvider, lat: float, lon: float,
           on_response: Optional[Callable[[FetchResponse], None]]) -> FetchResponse:
    response = provider.fetch(lat, lon)
    if on_response is not None:
        on_response(response)
    return provider.check_response(response)


def _remove_partial(artifacts: Dict[str, Path]) -> None:
    for kind, path in artifacts.items():
        if path.is_file():
            path.unlink()
            logger.warning(f"[pipeline] Removed partial {kind} artifact: {path}")


def _write_artifacts(settings: Settings, response: FetchResponse, table: pd.DataFrame,
                     title: str, annual: Dict[str, float], chart_format: str) -> Dict[str, Path]:
    out_dir = Path(settings.output_dir)
    stem = artifact_stem(settings.lat, settings.lon)
    artifacts = {
        "raw": out_dir / f"solar_resource_{stem}.json",
        "csv": out_dir / f"monthly_irradiance_{stem}.csv",
        "chart": out_dir / f"monthly_irradiance_{stem}.{chart_format}",
    }

    # Chart goes last; anything already written is removed if a later write fails
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
        with open(artifacts["raw"], 'w', encoding='utf-8') as f:
            json.dump(json.loads(response.raw_body), f, indent=2)
        table.to_csv(artifacts["csv"], index=False)
        fig = render_chart(table, title, path=artifacts["chart"], annual=annual)
        plt.close(fig)
    except OSError as e:
        _remove_partial(artifacts)
        raise RenderError(f"Could not write artifacts to {out_dir}: {e}") from e
    except RenderError:
        _remove_partial(artifacts)
        raise

    for kind, path in artifacts.items():
        logger.info(f"[pipeline] Wrote {kind}: {path}")
    return artifacts


def run(
    settings: Settings,
    client: Optional[httpx.Client] = None,
    chart_format: str = "png",
    on_response: Optional[Callable[[FetchResponse], None]] = None,
) -> PipelineResult:
    """
    Execute fetch -> decode -> reshape -> render.

    Args:
        settings: Run settings (must carry an API key)
        client: Optional httpx.Client for the transport
        chart_format: 'png' or 'pdf'
        on_response: Called with the raw response before it is checked,
            so callers can show status code and content type

    Returns:
        PipelineResult

    Raises:
        PipelineError: wrapping the failing stage's SunResourceError
    """
    if chart_format not in ("png", "pdf"):
        raise PipelineError("render", ConfigError(f"Unsupported chart format: {chart_format}"))

    logger.info("=" * 60)
    logger.info(f"Sun Resource - Run for ({settings.lat}, {settings.lon})")
    logger.info("=" * 60)

    api_key = _stage("fetch", settings.require_api_key)
    provider = SolarResourceProvider(api_key, timeout=settings.timeout_seconds, client=client)

    response = _stage("fetch", _fetch, provider, settings.lat, settings.lon, on_response)
    api_response = _stage("decode", decode, response.raw_body)
    table = _stage("reshape", reshape, api_response.outputs)

    title = location_title(settings.lat, settings.lon)
    annual = annual_summary(api_response.outputs)
    artifacts = _stage("render", _write_artifacts, settings, response, table,
                       title, annual, chart_format)

    return PipelineResult(
        response=response,
        api_response=api_response,
        table=table,
        title=title,
        artifacts=artifacts,
    )


def main() -> int:
    """Run with settings from the environment. Returns a process exit code."""
    try:
        settings = Settings.from_env()
    except ConfigError as e:
        configure_logging()
        logger.error(f"[main] {e}")
        return 1
    configure_logging(settings.log_level)

    try:
        result = run(settings)
    except PipelineError as e:
        logger.error(f"[main] Run failed at stage '{e.stage}': {e.cause}")
        return 1

    logger.info(f"[main] Chart: {result.artifacts['chart']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
