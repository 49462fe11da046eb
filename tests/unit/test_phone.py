"""Unit tests for regional phone number normalization."""

import pytest

from audit_relay.core.phone import mask_phone, normalize_phone


class TestNormalizePhone:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("9876543210", "919876543210"),
            ("09876543210", "919876543210"),
            ("919876543210", "919876543210"),
            ("+91 98765-43210", "919876543210"),
            (9876543210, "919876543210"),
            ("6123456789", "916123456789"),
            ("1234567890", "1234567890"),
            ("5123456789", "5123456789"),
            ("+1 (415) 555-2671", "14155552671"),
            ("123456789012345", "123456789012345"),
        ],
    )
    def test_valid_numbers(self, raw, expected):
        assert normalize_phone(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        ["12345", "987654321", "1234567890123456", "", None, "phone", "++--"],
    )
    def test_invalid_numbers(self, raw):
        assert normalize_phone(raw) is None

    def test_eleven_digits_without_trunk_zero_kept_as_is(self):
        assert normalize_phone("19876543210") == "19876543210"


class TestMaskPhone:
    def test_masks_middle_digits(self):
        assert mask_phone("919876543210") == "919****3210"

    def test_short_input_fully_masked(self):
        assert mask_phone("12345") == "****"

    def test_none(self):
        assert mask_phone(None) is None


class TestNonAsciiDigits:
    @pytest.mark.parametrize(
        "raw",
        ["９８７６５４３２１０", "٩٨٧٦٥٤٣٢١٠", "९८७६५४३२१०"],
    )
    def test_script_digits_fold_to_ascii(self, raw):
        assert normalize_phone(raw) == "919876543210"

    def test_result_is_plain_ascii(self):
        assert normalize_phone("+９１ ９８７６５-４３２１０").isascii()

    def test_superscripts_are_not_digits(self):
        assert normalize_phone("98765432¹⁰") is None

    def test_mask_folds_digits(self):
        assert mask_phone("９１９８７６５４３２１０") == "919****3210"
