"""Tests for dotted-quad validation and binary encoding."""

import pytest

from clientip.core.codec import (
    fill_partial_address,
    from_binary,
    is_valid_ipv4,
    to_binary,
)

# =========================================================================
# is_valid_ipv4
# =========================================================================


class TestIsValidIPv4:
    @pytest.mark.parametrize(
        "value",
        ["192.168.1.1", "0.0.0.0", "255.255.255.255", "8.8.8.8", "010.1.1.1"],
    )
    def test_valid(self, value):
        assert is_valid_ipv4(value) is True

    @pytest.mark.parametrize(
        "value",
        [
            "192.168.1.256",
            "1.2.3",
            "1.2.3.4.5",
            "",
            "a.b.c.d",
            "1.2.3.-1",
            "1..2.3",
            "1.2.3.4.",
            " 1.2.3.4",
            "1.2.3.4 ",
            "1_0.0.0.1",
            "unknown",
            "1.1.1." + "0" * 5000,
        ],
    )
    def test_invalid(self, value):
        assert is_valid_ipv4(value) is False

    def test_none_is_invalid(self):
        assert is_valid_ipv4(None) is False

    def test_non_string_is_invalid(self):
        assert is_valid_ipv4(3232235777) is False

    def test_explicit_plus_sign_accepted(self):
        assert is_valid_ipv4("+1.2.3.4") is True


# =========================================================================
# to_binary / from_binary
# =========================================================================


class TestToBinary:
    def test_all_zeros(self):
        assert to_binary("0.0.0.0") == "0" * 32

    def test_all_ones(self):
        assert to_binary("255.255.255.255") == "1" * 32

    def test_octets_zero_padded_in_order(self):
        assert to_binary("10.0.0.5") == (
            "00001010" "00000000" "00000000" "00000101"
        )

    def test_invalid_returns_none(self):
        assert to_binary("300.1.1.1") is None
        assert to_binary(None) is None

    def test_leading_zero_octet_normalised(self):
        assert to_binary("010.1.1.1") == to_binary("10.1.1.1")


class TestFromBinary:
    @pytest.mark.parametrize(
        "ip", ["0.0.0.0", "127.0.0.1", "172.16.254.3", "255.255.255.255"]
    )
    def test_round_trip(self, ip):
        assert from_binary(to_binary(ip)) == ip

    def test_rejects_wrong_length(self):
        assert from_binary("0" * 31) is None
        assert from_binary("0" * 33) is None

    def test_rejects_non_binary(self):
        assert from_binary("2" * 32) is None
        assert from_binary(None) is None


# =========================================================================
# fill_partial_address
# =========================================================================


class TestFillPartialAddress:
    def test_three_octets(self):
        assert fill_partial_address("172.18.60") == "172.18.60.0"

    def test_single_octet(self):
        assert fill_partial_address("10") == "10.0.0.0"

    def test_complete_address_unchanged(self):
        assert fill_partial_address("192.168.1.1") == "192.168.1.1"

    def test_trims_whitespace(self):
        assert fill_partial_address("  172.16 ") == "172.16.0.0"

    def test_longer_input_not_truncated(self):
        assert fill_partial_address("1.2.3.4.5") == "1.2.3.4.5"

    def test_result_not_validated(self):
        assert fill_partial_address("999.1") == "999.1.0.0"

    def test_none(self):
        assert fill_partial_address(None) is None
