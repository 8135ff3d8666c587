"""
Decoding of MIME entities from a structurally parsed email message.

Given the fields and byte offsets of one part, produces decoded headers,
address lists and body text.
"""

from .config import DecoderConfig, configure_logging
from .domain.entity import Entity
from .domain.models import AddressEntry
from .services.middleware import MiddlewareStack
from .services.store import BytesStore, StoreIOError, StreamStore

__all__ = [
    'AddressEntry',
    'BytesStore',
    'DecoderConfig',
    'Entity',
    'MiddlewareStack',
    'StoreIOError',
    'StreamStore',
    'configure_logging',
]
