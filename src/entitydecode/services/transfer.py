"""
Content-transfer-encoding reversal.

Turns base64 and quoted-printable bodies back into raw octets. Any other
encoding name (7bit, 8bit, binary, empty, unknown) is passed through.
"""

import base64
import binascii
import logging
import quopri
import re

logger = logging.getLogger(__name__)

_BASE64_JUNK = re.compile(rb'[^A-Za-z0-9+/]')

IDENTITY_ENCODINGS = ('7bit', '8bit', 'binary', '')


def decode_base64(data: bytes) -> bytes:
    """
    Decode base64, ignoring characters outside the standard alphabet.

    Padding is recomputed from the cleaned input, so missing or extra '='
    never causes a failure. A dangling single character is dropped.
    """
    cleaned = _BASE64_JUNK.sub(b'', data)
    remainder = len(cleaned) % 4
    if remainder == 1:
        cleaned = cleaned[:-1]
    elif remainder:
        cleaned += b'=' * (4 - remainder)

    try:
        return base64.b64decode(cleaned)
    except (binascii.Error, ValueError) as e:
        logger.warning(f"base64 decoding failed, returning input unchanged: {e}")
        return data


def decode_quoted_printable(data: bytes) -> bytes:
    """Decode RFC 2045 quoted-printable (soft line breaks and =XX escapes)."""
    return quopri.decodestring(data)


class ContentTransferDecoder:
    """Reverses the content-transfer-encoding applied to a body."""

    def reverse(self, data: bytes, encoding_name: str) -> bytes:
        """
        Reverse a content-transfer-encoding.

        Args:
            data: Encoded body octets
            encoding_name: Value of Content-Transfer-Encoding (any case, may be None)

        Returns:
            bytes: Decoded octets, or data unchanged for identity/unknown encodings
        """
        if not data:
            return b''

        name = (encoding_name or '').strip().lower()

        if name == 'base64':
            return decode_base64(data)
        if name == 'quoted-printable':
            return decode_quoted_printable(data)

        if name not in IDENTITY_ENCODINGS:
            logger.debug(f"Unsupported transfer encoding '{name}', passing body through")
        return data
