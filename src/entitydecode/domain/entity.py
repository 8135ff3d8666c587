"""
Entity facade over one node of a structurally parsed message.

The structural parser supplies an id, a field mapping (headers plus
content-type/disposition/charset/transfer-encoding convenience fields and
byte offsets) and the message's shared backing store. This class answers
"what are your decoded headers / addresses / body" for that node.

Field data is handed out by copy. To change it, take fields(), edit the
copy and call replace_fields(), which returns a new Entity.
"""

import copy
import logging
from typing import Any, Dict, List, Mapping, Optional

from ..config import DecoderConfig
from ..services.addresses import parse_addresses
from ..services.charset import charset_from_transfer_encoding, is_valid_utf8
from ..services.store import BackingStore
from .models import AddressEntry

logger = logging.getLogger(__name__)


class Entity:
    """
    One MIME entity (whole message or one part).

    Args:
        entity_id: Path-like part id, e.g. "1.2"
        fields: Field mapping from the structural parser
        store: Backing store shared by every entity of the message
        config: Decoding services; a default DecoderConfig when omitted
    """

    def __init__(
        self,
        entity_id: str,
        fields: Mapping[str, Any],
        store: BackingStore,
        config: Optional[DecoderConfig] = None,
    ):
        self._id = entity_id
        self._fields = copy.deepcopy(dict(fields))
        self._store = store
        self.config = config or DecoderConfig()

    def __repr__(self) -> str:
        return f"Entity(id={self._id!r}, content_type={self.content_type!r})"

    @property
    def id(self) -> str:
        return self._id

    def fields(self) -> Dict[str, Any]:
        """Return a copy of the whole field mapping."""
        return copy.deepcopy(self._fields)

    def replace_fields(self, fields: Mapping[str, Any]) -> 'Entity':
        """Return a new Entity with the field mapping replaced as a whole."""
        return Entity(self._id, fields, self._store, self.config)

    def _field(self, name: str) -> Any:
        value = self._fields.get(name)
        if isinstance(value, (dict, list)):
            return copy.deepcopy(value)
        return value

    # Field accessors

    @property
    def content_type(self) -> Optional[str]:
        return self._field('content-type')

    @property
    def content_disposition(self) -> Optional[str]:
        return self._field('content-disposition')

    @property
    def disposition_filename(self) -> Optional[str]:
        return self._field('disposition-filename')

    @property
    def content_name(self) -> Optional[str]:
        return self._field('content-name')

    @property
    def content_id(self) -> Optional[str]:
        return self._field('content-id')

    @property
    def charset(self) -> Optional[str]:
        return self._field('charset')

    @property
    def transfer_encoding(self) -> Optional[str]:
        return self._field('transfer-encoding')

    def _offset(self, name: str) -> Optional[int]:
        value = self._fields.get(name)
        if value is None:
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning(f"Entity {self._id}: ignoring non-integer offset {name}={value!r}")
            return None

    @property
    def start(self) -> Optional[int]:
        return self._offset('starting-pos')

    @property
    def end(self) -> Optional[int]:
        return self._offset('ending-pos')

    @property
    def body_start(self) -> Optional[int]:
        return self._offset('starting-pos-body')

    @property
    def body_end(self) -> Optional[int]:
        return self._offset('ending-pos-body')

    # Headers

    def headers_raw(self) -> Dict[str, Any]:
        """All headers as stored; repeated headers are lists."""
        return self._field('headers') or {}

    def headers(self) -> Dict[str, Any]:
        """All headers with RFC 2047 encoded words decoded."""
        decode = self.config.header_decoder.decode
        decoded = {}
        for name, value in self.headers_raw().items():
            if isinstance(value, (list, tuple)):
                decoded[name] = [decode(item) for item in value]
            else:
                decoded[name] = decode(value)
        return decoded

    def header_raw(self, name: str) -> Optional[str]:
        """
        One header as stored, matched case-insensitively.

        When the header repeats, the first occurrence is returned.
        """
        headers = self._fields.get('headers') or {}
        wanted = name.lower()

        if wanted in headers:
            value = headers[wanted]
        else:
            value = next((v for k, v in headers.items() if k.lower() == wanted), None)

        if isinstance(value, (list, tuple)):
            return value[0] if value else None
        return value

    def header(self, name: str) -> Optional[str]:
        """One header with RFC 2047 encoded words decoded."""
        raw = self.header_raw(name)
        if raw is None:
            return None
        return self.config.header_decoder.decode(raw)

    # Addresses

    def addresses_raw(self, name: str) -> List[AddressEntry]:
        """Address list of a header, display names left encoded."""
        return parse_addresses(self.header_raw(name))

    def addresses(self, name: str) -> List[AddressEntry]:
        """Address list of a header with display names decoded."""
        return parse_addresses(self.header_raw(name), self.config.header_decoder)

    # Body

    def read_range(self, start: Optional[int], end: Optional[int]) -> bytes:
        """
        Raw bytes [start, end) of the message.

        Raises:
            StoreIOError: If the backing store cannot be read
        """
        if start is None or end is None or start >= end:
            return b''
        return self._store.read_range(start, end)

    def body(self) -> bytes:
        """Raw (still transfer-encoded) body of this entity."""
        return self.read_range(self.body_start, self.body_end)

    def complete_body(self) -> bytes:
        """Raw bytes of the whole entity, headers included."""
        return self.read_range(self.start, self.end)

    def decoded(self) -> str:
        """
        Body with the transfer encoding reversed and converted to text.

        Raises:
            StoreIOError: If the backing store cannot be read
        """
        octets = self.config.transfer_decoder.reverse(self.body(), self.transfer_encoding)
        charset = self.charset

        if not charset and self.config.transfer_encoding_charset_fallback and not is_valid_utf8(octets):
            charset = charset_from_transfer_encoding(self.transfer_encoding)
            if charset:
                logger.debug(
                    f"Entity {self._id}: assuming {charset} from "
                    f"transfer encoding {self.transfer_encoding}"
                )

        return self.config.charset_manager.normalize(octets, charset)

    def is_text_message(self, subtype: str) -> bool:
        """True for an inline (or undisposed) part of type text/<subtype>."""
        disposition = (self.content_disposition or '').lower()
        content_type = (self.content_type or '').lower()
        return disposition in ('', 'inline') and content_type == f"text/{subtype.lower()}"

    def parse(self):
        """Run this entity through the configured middleware stack."""
        return self.config.middleware.parse(self)
