"""
Tests for the Decoder (raw JSON -> ApiResponse)

Run with: python -m pytest tests/test_decoder.py -v
"""

import json
import logging

import pytest

from sun_resource.decoder import ApiResponse, SeriesData, decode, parse_series
from sun_resource.errors import DecodeError, SchemaError

logging.basicConfig(level=logging.DEBUG)
logger = logging.getLogger(__name__)


class TestDecodeSample:
    """Decoding the sample response."""

    def test_decodes_all_fields(self, sample_body):
        logger.info("[TEST] Decoding sample response...")
        response = decode(sample_body)

        assert isinstance(response, ApiResponse)
        assert response.version == "1.0.0"
        assert response.warnings == ()
        assert response.errors == ()
        assert response.sources == ("Perez-SUNY/NREL, 2012",)
        assert dict(response.inputs) == {"lat": "40", "lon": "-105"}

    def test_series_order_preserved(self, sample_body):
        response = decode(sample_body)
        assert response.series_names == ["avg_dni", "avg_ghi", "avg_lat_tilt"]

    def test_series_values(self, sample_body):
        series = decode(sample_body).outputs["avg_dni"]
        assert isinstance(series, SeriesData)
        assert series.annual == 4.02
        assert series.monthly["jan"] == 3.12
        assert series.monthly["dec"] == 2.72
        assert len(series.monthly) == 12

    def test_outputs_are_read_only(self, sample_body):
        response = decode(sample_body)
        with pytest.raises(TypeError):
            response.outputs["avg_dni"] = None
        with pytest.raises(TypeError):
            response.outputs["avg_dni"].monthly["jan"] = 0.0

    def test_integer_values_become_float(self, sample_data):
        sample_data["outputs"]["avg_ghi"]["annual"] = 4
        sample_data["outputs"]["avg_ghi"]["monthly"]["jan"] = 2
        series = decode(json.dumps(sample_data)).outputs["avg_ghi"]
        assert isinstance(series.annual, float)
        assert isinstance(series.monthly["jan"], float)

    def test_optional_fields_default(self, sample_data):
        body = json.dumps({"outputs": sample_data["outputs"]})
        response = decode(body)
        assert response.version == ""
        assert response.sources == ()
        assert dict(response.inputs) == {}

    def test_upstream_warnings_logged(self, sample_data, caplog):
        sample_data["warnings"] = ["Coordinates snapped to nearest grid cell"]
        with caplog.at_level(logging.WARNING, logger="sun_resource.decoder"):
            response = decode(json.dumps(sample_data))
        assert response.warnings == ("Coordinates snapped to nearest grid cell",)
        assert "Coordinates snapped" in caplog.text


class TestDecodeErrors:

    @pytest.mark.parametrize("body", ["", "{", "not json", '{"outputs": }'])
    def test_malformed_json(self, body):
        logger.info(f"[TEST] Malformed body: {body!r}")
        with pytest.raises(DecodeError):
            decode(body)

    @pytest.mark.parametrize("body", ["[]", "42", '"text"', "null"])
    def test_top_level_not_object(self, body):
        with pytest.raises(SchemaError):
            decode(body)

    def test_missing_outputs(self, sample_data):
        del sample_data["outputs"]
        with pytest.raises(SchemaError, match="outputs"):
            decode(json.dumps(sample_data))

    def test_outputs_not_object(self, sample_data):
        sample_data["outputs"] = ["avg_dni"]
        with pytest.raises(SchemaError):
            decode(json.dumps(sample_data))

    def test_no_data_series(self, sample_data):
        sample_data["outputs"]["avg_dni"] = "no data"
        with pytest.raises(SchemaError, match="avg_dni"):
            decode(json.dumps(sample_data))

    def test_non_numeric_month(self, sample_data):
        sample_data["outputs"]["avg_ghi"]["monthly"]["may"] = "5.7"
        with pytest.raises(SchemaError, match="may"):
            decode(json.dumps(sample_data))

    def test_boolean_rejected(self, sample_data):
        sample_data["outputs"]["avg_ghi"]["annual"] = True
        with pytest.raises(SchemaError):
            decode(json.dumps(sample_data))

    def test_warnings_not_list(self, sample_data):
        sample_data["warnings"] = "careful"
        with pytest.raises(SchemaError):
            decode(json.dumps(sample_data))

    def test_number_too_large_for_float(self, sample_data):
        logger.info("[TEST] Testing 400-digit monthly value...")
        body = json.dumps(sample_data).replace("3.12", "1" + "0" * 400, 1)
        with pytest.raises(SchemaError, match="too large"):
            decode(body)

    def test_annual_too_large_for_float(self, sample_data):
        body = json.dumps(sample_data).replace("4.02", "9" * 400, 1)
        with pytest.raises(SchemaError, match="annual"):
            decode(body)

    def test_integer_past_digit_limit(self, sample_data):
        """Interpreters with an int digit limit reject this inside json.loads."""
        body = json.dumps(sample_data).replace("3.12", "1" + "0" * 5000, 1)
        with pytest.raises((DecodeError, SchemaError)):
            decode(body)

    def test_decode_error_is_not_schema_error(self):
        with pytest.raises(DecodeError) as exc_info:
            decode("{")
        assert not isinstance(exc_info.value, SchemaError)


class TestParseSeries:

    def test_missing_monthly(self):
        with pytest.raises(SchemaError, match="monthly"):
            parse_series("avg_dni", {"annual": 1.0})

    def test_monthly_not_object(self):
        with pytest.raises(SchemaError):
            parse_series("avg_dni", {"annual": 1.0, "monthly": [1.0, 2.0]})

    def test_missing_annual(self):
        with pytest.raises(SchemaError, match="annual"):
            parse_series("avg_dni", {"monthly": {"jan": 1.0}})

    def test_partial_months_accepted(self):
        """Month coverage is checked by the reshaper, not here."""
        series = parse_series("avg_dni", {"annual": 1.0, "monthly": {"jan": 1.0}})
        assert dict(series.monthly) == {"jan": 1.0}
