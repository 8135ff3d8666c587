"""
RFC 2047 header decoding.

Encoded words look like =?charset?Q?payload?= or =?charset?B?payload?=.
Adjacent encoded words separated only by folding whitespace are joined
without that whitespace; everything else in the value is left untouched.
"""

import logging
import quopri
import re
from typing import Optional

from .charset import CharsetManager
from .transfer import decode_base64

logger = logging.getLogger(__name__)

ENCODED_WORD = r'=\?([^?\s]+)\?([QqBb])\?([^?\s]*)\?='

_ENCODED_WORD_RE = re.compile(ENCODED_WORD)
# One or more encoded words separated only by whitespace
_ENCODED_WORD_RUN_RE = re.compile(rf'{ENCODED_WORD}(?:\s+{ENCODED_WORD})*')


class HeaderDecoder:
    """Decodes RFC 2047 encoded words inside header values."""

    def __init__(self, charset_manager: Optional[CharsetManager] = None):
        self.charset_manager = charset_manager or CharsetManager()

    def decode(self, raw_header_value: str) -> str:
        """
        Decode every encoded word in a header value.

        Args:
            raw_header_value: Header value as received

        Returns:
            str: Decoded value, identical to the input when it holds no encoded word

        Example:
            >>> HeaderDecoder().decode("=?utf-8?Q?Hello?= =?utf-8?Q?World?=")
            'HelloWorld'
        """
        if not raw_header_value:
            return raw_header_value or ''
        if '=?' not in raw_header_value:
            return raw_header_value

        # single pass: decoded text is never rescanned
        return _ENCODED_WORD_RUN_RE.sub(self._decode_run, raw_header_value)

    def decode_word(self, charset: str, encoding: str, payload: str) -> str:
        """Decode the payload of one encoded word into text."""
        octets = payload.encode('ascii', errors='replace')

        if encoding.lower() == 'b':
            octets = decode_base64(octets)
        else:
            octets = quopri.decodestring(octets, header=True)

        return self.charset_manager.normalize(octets, charset)

    def _decode_run(self, match: re.Match) -> str:
        return ''.join(
            self._decode_match(word)
            for word in _ENCODED_WORD_RE.finditer(match.group(0))
        )

    def _decode_match(self, match: re.Match) -> str:
        charset, encoding, payload = match.groups()
        return self.decode_word(charset, encoding, payload)
