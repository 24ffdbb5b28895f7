"""
Property-based tests for address classification.
"""

import ipaddress

from hypothesis import given
from hypothesis import strategies as st

from zipjit.domain.address_guard import is_blocked

from .strategies import blocked_addresses, blocked_ipv4_addresses, public_addresses


class TestIsBlockedProperties:
    @given(blocked_addresses())
    def test_every_address_in_a_blocked_range_is_blocked(self, address):
        assert is_blocked(address)
        assert is_blocked(str(address))

    @given(public_addresses())
    def test_public_ranges_are_allowed(self, address):
        assert not is_blocked(address)

    @given(blocked_ipv4_addresses())
    def test_ipv4_mapped_form_is_blocked(self, address):
        mapped = ipaddress.IPv6Address(f"::ffff:{address}")

        assert is_blocked(mapped)

    @given(blocked_ipv4_addresses(), st.integers(min_value=0, max_value=2 ** 80 - 1))
    def test_6to4_form_is_blocked(self, address, suffix):
        six_to_four = ipaddress.IPv6Address((0x2002 << 112) | (int(address) << 80) | suffix)

        assert is_blocked(six_to_four)

    @given(blocked_ipv4_addresses())
    def test_nat64_form_is_blocked(self, address):
        nat64 = ipaddress.IPv6Address(int(ipaddress.IPv6Address("64:ff9b::")) | int(address))

        assert is_blocked(nat64)

    @given(st.text(alphabet="ghijklmnopqrstuvwxyz-_ ", min_size=1))
    def test_non_addresses_are_blocked(self, text):
        assert is_blocked(text)

    @given(blocked_ipv4_addresses())
    def test_ipv4_compatible_form_is_blocked(self, address):
        assert is_blocked(ipaddress.IPv6Address(int(address)))

    @given(st.integers(min_value=0, max_value=2 ** 32 - 1))
    def test_ipv4_translated_form_is_blocked(self, value):
        translated = ipaddress.IPv6Address((0xFFFF << 48) | value)

        assert is_blocked(translated)

    @given(st.integers(min_value=0, max_value=2 ** 80 - 1))
    def test_local_use_nat64_form_is_blocked(self, suffix):
        local_nat64 = ipaddress.IPv6Address(int(ipaddress.IPv6Address("64:ff9b:1::")) | suffix)

        assert is_blocked(local_nat64)

    @given(st.integers(min_value=0, max_value=2 ** 96 - 1))
    def test_teredo_form_is_blocked(self, suffix):
        teredo = ipaddress.IPv6Address((0x20010000 << 96) | suffix)

        assert is_blocked(teredo)
