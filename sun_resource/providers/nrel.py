"""
NREL Solar Resource Provider for Sun Resource

Fetches the Solar Resource summary from developer.nrel.gov for a single
coordinate pair. The response holds annual and monthly averages of:
- avg_dni       - Direct Normal Irradiance
- avg_ghi       - Global Horizontal Irradiance
- avg_lat_tilt  - Irradiance on a surface tilted at the site latitude

All values are kWh/m²/day. One GET per run, no retries: any failure is
raised as TransportError and ends the run.

The API key travels as a query parameter, so every URL and parameter set
is passed through redact() before it reaches a log line or an exception.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import httpx

from sun_resource.errors import ConfigError, TransportError

logger = logging.getLogger(__name__)

REDACTED = "***"


@dataclass(frozen=True)
class FetchResponse:
    """What the transport hands back: status, content type and raw body."""
    status_code: int
    content_type: str
    raw_body: str
    url: str  # already redacted

    @property
    def is_json(self) -> bool:
        return "json" in self.content_type.lower()


def redact(params: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy of request params with the API key masked."""
    return {k: (REDACTED if k == "api_key" else v) for k, v in params.items()}


def redact_url(url: str) -> str:
    """Mask the api_key query parameter in a URL."""
    parsed = httpx.URL(url)
    if "api_key" not in parsed.params:
        return url
    return str(parsed.copy_set_param("api_key", REDACTED))


def _upstream_error(raw_body: str) -> Optional[str]:
    """
    Pull the first error message out of an upstream error body.

    NREL returns {"errors": ["..."]}; the api.data.gov gateway in front of it
    returns {"error": {"code": "...", "message": "..."}} for key problems.
    """
    try:
        data = json.loads(raw_body)
    except ValueError:
        return None

    if not isinstance(data, dict):
        return None

    errors = data.get("errors")
    if isinstance(errors, list) and errors:
        return str(errors[0])

    gateway = data.get("error")
    if isinstance(gateway, dict):
        code = gateway.get("code")
        message = gateway.get("message")
        if code and message:
            return f"{code}: {message}"
        return message or code

    return None


class SolarResourceProvider:
    """
    Provider for the NREL Solar Resource summary (solar_resource/v1.json).

    The API key is passed in explicitly; this class never reads the
    environment.
    """

    BASE_URL = "https://developer.nrel.gov/api/solar/solar_resource/v1.json"

    HEADERS = {
        "User-Agent": "SunResource/1.0",
        "Accept": "application/json",
    }

    def __init__(self, api_key: str, timeout: float = 30.0,
                 client: Optional[httpx.Client] = None):
        """
        Args:
            api_key: developer.nrel.gov API key
            timeout: Request timeout in seconds
            client: Optional pre-built httpx.Client (tests inject a MockTransport)
        """
        if not api_key:
            raise ConfigError("api_key is required")
        self.api_key = api_key
        self.timeout = timeout
        self._client = client
        logger.debug(f"[SolarResourceProvider] Initialized (timeout={timeout}s)")

    def build_params(self, lat: float, lon: float) -> Dict[str, Any]:
        """Assemble the query parameters for one request."""
        return {
            "api_key": self.api_key,
            "lat": lat,
            "lon": lon,
        }

    def fetch(self, lat: float, lon: float) -> FetchResponse:
        """
        Issue the GET request.

        Returns the response whatever its status; check_response() decides
        whether it is usable. Network failures and timeouts raise
        TransportError straight away.
        """
        params = self.build_params(lat, lon)
        logger.info(f"[SolarResourceProvider] Fetching solar resource for ({lat}, {lon})")
        logger.debug(f"[SolarResourceProvider] Request params: {redact(params)}")

        try:
            if self._client is not None:
                resp = self._client.get(self.BASE_URL, params=params,
                                        headers=self.HEADERS, timeout=self.timeout)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    resp = client.get(self.BASE_URL, params=params, headers=self.HEADERS)

        except httpx.TimeoutException as e:
            logger.warning(f"[SolarResourceProvider] Request timed out after {self.timeout}s")
            raise TransportError(f"Request timed out after {self.timeout}s") from e
        except httpx.RequestError as e:
            logger.warning(f"[SolarResourceProvider] Request error: {type(e).__name__}")
            raise TransportError(f"Request failed: {type(e).__name__}: {e}") from e

        result = FetchResponse(
            status_code=resp.status_code,
            content_type=resp.headers.get("content-type", ""),
            raw_body=resp.text,
            url=redact_url(str(resp.url)),
        )

        logger.info(f"[SolarResourceProvider] Response status: {result.status_code}")
        logger.info(f"[SolarResourceProvider] Content type: {result.content_type or '(none)'}")
        logger.debug(f"[SolarResourceProvider] URL: {result.url}")
        return result

    @staticmethod
    def check_response(response: FetchResponse) -> FetchResponse:
        """
        Raise TransportError unless the response is a 200 JSON body.

        Returns the response unchanged so calls can be chained.
        """
        if response.status_code != 200:
            detail = _upstream_error(response.raw_body)
            message = f"HTTP {response.status_code}"
            if detail:
                message += f": {detail}"
            logger.warning(f"[SolarResourceProvider] {message}")
            raise TransportError(message, status_code=response.status_code,
                                 content_type=response.content_type)

        if not response.is_json:
            logger.warning(
                f"[SolarResourceProvider] Unexpected content type: {response.content_type!r}"
            )
            raise TransportError(
                f"Expected application/json, got {response.content_type or 'no content type'}",
                status_code=response.status_code,
                content_type=response.content_type,
            )

        return response


if __name__ == "__main__":
    # Test the provider
    import os

    from dotenv import load_dotenv

    logging.basicConfig(level=logging.INFO)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    load_dotenv()

    provider = SolarResourceProvider(api_key=os.getenv("NREL_API_KEY", ""))
    response = provider.fetch(40.0, -105.0)
    print(f"Status: {response.status_code}")
    print(f"Content type: {response.content_type}")
    print(response.raw_body[:500])
