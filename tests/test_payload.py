"""Tests de parsing y normalización del payload de ingesta."""

import math

import pytest

from sensor_api.errors import ValidationError
from sensor_api.ingest.payload import (
    coerce_bool,
    coerce_float,
    coerce_int,
    decode_body,
    normalize_payload,
)


# =============================================================================
# TESTS: DECODIFICACIÓN DEL BODY
# =============================================================================

class TestDecodeBody:
    """JSON u form-encoded, nunca excepción."""

    def test_json_object(self):
        assert decode_body(b'{"temperature": 24.5}') == {"temperature": 24.5}

    def test_form_encoded(self):
        assert decode_body(b"temperature=24.5&relay_on=1") == {
            "temperature": "24.5",
            "relay_on": "1",
        }

    def test_empty_body(self):
        assert decode_body(b"") == {}

    def test_json_array_is_not_a_reading(self):
        with pytest.raises(ValidationError):
            normalize_payload(decode_body(b"[1, 2]"))

    def test_invalid_utf8(self):
        assert decode_body(b"\xff\xfe\xfd") == {}


# =============================================================================
# TESTS: COERCIÓN
# =============================================================================

class TestCoercion:
    """Campos mal formados -> None, nunca rechazo."""

    def test_float_from_string(self):
        assert coerce_float(" 24.5 ") == 24.5

    def test_float_malformed(self):
        assert coerce_float("abc") is None

    def test_float_nan_and_inf(self):
        assert coerce_float(math.nan) is None
        assert coerce_float("inf") is None

    def test_int_truncates(self):
        assert coerce_int("12.7") == 12

    def test_int_out_of_range(self):
        assert coerce_int(1e30) is None
        assert coerce_int(2**31) is None
        assert coerce_int(2**31 - 1) == 2**31 - 1
        assert coerce_int(10**400) is None

    @pytest.mark.parametrize("raw", [True, 1, "1", "true", "ON", "yes"])
    def test_bool_true(self, raw):
        assert coerce_bool(raw) is True

    @pytest.mark.parametrize("raw", [False, 0, "0", "false", "off", ""])
    def test_bool_false(self, raw):
        assert coerce_bool(raw) is False

    def test_bool_unparseable(self):
        assert coerce_bool("maybe") is None
        assert coerce_bool(None) is None


# =============================================================================
# TESTS: NORMALIZACIÓN
# =============================================================================

class TestNormalizePayload:

    def test_empty_payload_rejected(self):
        with pytest.raises(ValidationError) as exc:
            normalize_payload({})
        assert exc.value.status_code == 400

    def test_unrecognized_fields_rejected(self):
        with pytest.raises(ValidationError):
            normalize_payload({"foo": 1, "bar": 2})

    def test_malformed_numeric_becomes_null(self):
        result = normalize_payload({"temperature": "n/a", "humidity": "55.5"})
        assert result == {"temperature": None, "humidity": 55.5}

    def test_unknown_fields_ignored(self):
        result = normalize_payload({"temperature": 20, "firmware": "1.2"})
        assert result == {"temperature": 20.0}

    def test_echo_flags_coerced(self):
        result = normalize_payload({"relay_on": "1", "led_on": "0", "motion_detected": 1})
        assert result == {"relay_on": True, "led_on": False, "motion_detected": True}
