"""
Decoder for NREL Solar Resource responses

Turns the raw JSON body into frozen ApiResponse / SeriesData values.
Shape problems are raised as SchemaError instead of surfacing later as a
KeyError or a None deep inside the reshaping step.

Wire format (field names are the upstream's and are kept as-is):

    {
      "version": "1.0.0",
      "warnings": [],
      "errors": [],
      "metadata": {"sources": ["Perez-SUNY/NREL, 2012"]},
      "inputs": {"lat": "40", "lon": "-105"},
      "outputs": {
        "avg_dni": {"annual": 6.06, "monthly": {"jan": 5.0, ...}},
        "avg_ghi": {...},
        "avg_lat_tilt": {...}
      }
    }

Month coverage is not checked here; that is the reshaper's job.
"""

import json
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Tuple

from sun_resource.errors import DecodeError, SchemaError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeriesData:
    """One irradiance series: annual average plus monthly averages."""
    annual: float
    monthly: Mapping[str, float]


@dataclass(frozen=True)
class ApiResponse:
    """Decoded solar_resource/v1.json response."""
    outputs: Mapping[str, SeriesData]
    version: str = ""
    warnings: Tuple[str, ...] = ()
    errors: Tuple[str, ...] = ()
    sources: Tuple[str, ...] = ()
    inputs: Mapping[str, str] = field(default_factory=dict)

    @property
    def series_names(self) -> List[str]:
        return list(self.outputs)


def _is_number(value: Any) -> bool:
    # bool is an int subclass; the upstream never sends one as a measurement
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _to_float(value: Any, where: str) -> float:
    try:
        return float(value)
    except OverflowError:
        raise SchemaError(f"{where} is too large for a float") from None


def _string_list(data: Mapping[str, Any], key: str) -> Tuple[str, ...]:
    value = data.get(key)
    if value is None:
        return ()
    if not isinstance(value, list):
        raise SchemaError(f"'{key}' must be a list, got {type(value).__name__}")
    return tuple(str(item) for item in value)


def parse_series(name: str, raw: Any) -> SeriesData:
    """
    Validate one entry of 'outputs' and convert it to SeriesData.

    Raises:
        SchemaError: entry is not a mapping, or annual/monthly have the wrong type
    """
    if isinstance(raw, str):
        # Points outside the dataset come back as "no data"
        raise SchemaError(f"Series '{name}' has no data: {raw!r}")
    if not isinstance(raw, Mapping):
        raise SchemaError(f"Series '{name}' must be an object, got {type(raw).__name__}")

    if "monthly" not in raw:
        raise SchemaError(f"Series '{name}' has no 'monthly' field")
    monthly_raw = raw["monthly"]
    if not isinstance(monthly_raw, Mapping):
        raise SchemaError(
            f"Series '{name}' field 'monthly' must be an object, got {type(monthly_raw).__name__}"
        )

    monthly: Dict[str, float] = {}
    for month, value in monthly_raw.items():
        if not _is_number(value):
            raise SchemaError(f"Series '{name}' month '{month}' is not a number: {value!r}")
        monthly[str(month)] = _to_float(value, f"Series '{name}' month '{month}'")

    annual = raw.get("annual")
    if not _is_number(annual):
        raise SchemaError(f"Series '{name}' field 'annual' is not a number: {annual!r}")

    return SeriesData(annual=_to_float(annual, f"Series '{name}' field 'annual'"),
                      monthly=MappingProxyType(monthly))


def parse_outputs(outputs: Any) -> Mapping[str, SeriesData]:
    """Validate the 'outputs' mapping, keeping the upstream series order."""
    if outputs is None:
        raise SchemaError("Response has no 'outputs' field")
    if not isinstance(outputs, Mapping):
        raise SchemaError(f"'outputs' must be an object, got {type(outputs).__name__}")

    parsed = {str(name): parse_series(str(name), raw) for name, raw in outputs.items()}
    return MappingProxyType(parsed)


def decode(raw_body: str) -> ApiResponse:
    """
    Parse a raw response body into an ApiResponse.

    Args:
        raw_body: Response text from the transport

    Returns:
        ApiResponse with validated outputs

    Raises:
        DecodeError: body is not valid JSON
        SchemaError: JSON does not have the expected shape
    """
    logger.info(f"[decode] Decoding {len(raw_body)} bytes of response body")

    try:
        data = json.loads(raw_body)
    except json.JSONDecodeError as e:
        logger.error(f"[decode] Malformed JSON at line {e.lineno} col {e.colno}: {e.msg}")
        raise DecodeError(f"Malformed JSON at line {e.lineno} column {e.colno}: {e.msg}") from e
    except ValueError as e:
        # e.g. integer literals past the interpreter's digit limit
        logger.error(f"[decode] Unparseable JSON: {e}")
        raise DecodeError(f"Unparseable JSON: {e}") from e

    if not isinstance(data, dict):
        raise SchemaError(f"Top-level JSON must be an object, got {type(data).__name__}")

    warnings = _string_list(data, "warnings")
    errors = _string_list(data, "errors")
    for warning in warnings:
        logger.warning(f"[decode] Upstream warning: {warning}")
    for error in errors:
        logger.error(f"[decode] Upstream error: {error}")

    metadata = data.get("metadata") or {}
    if not isinstance(metadata, Mapping):
        raise SchemaError(f"'metadata' must be an object, got {type(metadata).__name__}")

    inputs = data.get("inputs") or {}
    if not isinstance(inputs, Mapping):
        raise SchemaError(f"'inputs' must be an object, got {type(inputs).__name__}")

    response = ApiResponse(
        outputs=parse_outputs(data.get("outputs")),
        version=str(data.get("version", "")),
        warnings=warnings,
        errors=errors,
        sources=_string_list(metadata, "sources"),
        inputs=MappingProxyType({str(k): str(v) for k, v in inputs.items()}),
    )

    logger.info(
        f"[decode] Version {response.version or '?'}: "
        f"{len(response.outputs)} series ({', '.join(response.series_names)})"
    )
    return response
