"""
Tests for domain models (data structures).
"""

import dataclasses
import pytest
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

from entitydecode.domain.models import AddressEntry


class TestAddressEntry:
    """Test AddressEntry dataclass."""

    def test_address_entry_creation(self):
        """Test creating AddressEntry instance."""
        entry = AddressEntry(display="John Doe", address="john@example.com")

        assert entry.display == "John Doe"
        assert entry.address == "john@example.com"
        assert entry.is_group is False
        assert entry.mailbox == "john"
        assert entry.host == "example.com"

    def test_address_without_host(self):
        """Test an address with no '@'."""
        entry = AddressEntry(display="postmaster", address="postmaster")

        assert entry.mailbox == "postmaster"
        assert entry.host == ""

    def test_quoted_local_part_with_at(self):
        """Test that the last '@' separates host."""
        entry = AddressEntry(display="", address='"a@b"@example.com')

        assert entry.mailbox == '"a@b"'
        assert entry.host == "example.com"

    def test_entries_are_frozen(self):
        """Test that entries cannot be mutated."""
        entry = AddressEntry(display="x", address="x@y.com")

        with pytest.raises(dataclasses.FrozenInstanceError):
            entry.display = "changed"

    def test_with_display_returns_copy(self):
        """Test with_display() leaves the original alone."""
        entry = AddressEntry(display="=?utf-8?Q?x?=", address="x@y.com")
        decoded = entry.with_display("x")

        assert decoded.display == "x"
        assert entry.display == "=?utf-8?Q?x?="

    def test_to_dict(self):
        """Test dict form."""
        entry = AddressEntry(display="X", address="x@y.com")

        assert entry.to_dict() == {'display': 'X', 'address': 'x@y.com', 'is_group': False}
