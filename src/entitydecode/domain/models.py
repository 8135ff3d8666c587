"""
Data models for entity decoding.

These value types are handed to callers; they are never shared with the
entity that produced them.
"""

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class AddressEntry:
    """
    One mailbox from an RFC 822 address list.

    Attributes:
        display: Display name (the address itself when no name was given)
        address: Combined address, e.g. "john@example.com"
        is_group: Always False for emitted entries; group labels are expanded
    """
    display: str
    address: str
    is_group: bool = False

    @property
    def mailbox(self) -> str:
        """Local part of the address."""
        local, at, _ = self.address.rpartition('@')
        return local if at else self.address

    @property
    def host(self) -> str:
        """Domain part of the address (empty when there is none)."""
        return self.address.rpartition('@')[2] if '@' in self.address else ''

    def with_display(self, display: str) -> 'AddressEntry':
        return replace(self, display=display)

    def to_dict(self) -> dict:
        return {
            'display': self.display,
            'address': self.address,
            'is_group': self.is_group,
        }
