"""
Charset normalization to Unicode text.

Body and header octets arrive in whatever charset the sender declared (or
forgot to declare). This module turns them into str, trusting a declared
non-UTF-8 label and falling back to detection when UTF-8 is claimed (or
nothing is) but the bytes are not valid UTF-8.

Conversion and detection are small capabilities (Converter, Detector) so a
different backend can be plugged in without touching CharsetManager.
"""

import codecs
import logging
from typing import Optional, Protocol, Sequence

import charset_normalizer

logger = logging.getLogger(__name__)

# Order matters: the first candidate the detector accepts wins
DETECTION_CANDIDATES = ('windows-1252', 'iso-8859-1', 'gb2312', 'gb18030')

# Labels seen in the wild mapped to names Python's codec registry knows
CHARSET_ALIASES = {
    'ascii': 'us-ascii',
    'us-ascii': 'us-ascii',
    'ansi_x3.4-1968': 'us-ascii',
    'utf8': 'utf-8',
    'utf-8': 'utf-8',
    'unicode-1-1-utf-7': 'utf-7',
    'utf7': 'utf-7',
    'latin1': 'iso-8859-1',
    'latin-1': 'iso-8859-1',
    'iso8859-1': 'iso-8859-1',
    'iso_8859-1': 'iso-8859-1',
    'iso-8859-1': 'iso-8859-1',
    'iso8859-15': 'iso-8859-15',
    'latin-9': 'iso-8859-15',
    'iso-8859-8-i': 'iso-8859-8',
    'cp1252': 'windows-1252',
    'win-1252': 'windows-1252',
    'windows1252': 'windows-1252',
    'x-cp1252': 'windows-1252',
    'cp1250': 'windows-1250',
    'cp1251': 'windows-1251',
    'win-1251': 'windows-1251',
    'ks_c_5601-1987': 'cp949',
    'ks_c_5601': 'cp949',
    'ksc5601': 'cp949',
    'euc-kr': 'euc-kr',
    'x-sjis': 'shift_jis',
    'shift-jis': 'shift_jis',
    'sjis': 'shift_jis',
    'x-euc-jp': 'euc-jp',
    'gb2312': 'gb18030',
    'gbk': 'gb18030',
    'x-gbk': 'gb18030',
    'cp936': 'gb18030',
    'big5-hkscs': 'big5hkscs',
    'x-mac-roman': 'mac-roman',
    'macintosh': 'mac-roman',
    'x-user-defined': 'windows-1252',
    'default': 'windows-1252',
    'unknown-8bit': 'windows-1252',
    'x-unknown': 'windows-1252',
}

# Weak last resort when nothing else is known; off unless a caller opts in
TRANSFER_ENCODING_CHARSETS = {
    '8bit': 'windows-1252',
    '7bit': 'iso-8859-1',
}


def charset_alias(charset: Optional[str]) -> str:
    """
    Canonicalise a declared charset label.

    Strips quotes, whitespace and any RFC 2231 language suffix
    ("utf-8*en"). Unknown labels are returned lower-cased.
    """
    if not charset:
        return ''
    name = charset.strip().strip('"\'').split('*', 1)[0].strip().lower()
    return CHARSET_ALIASES.get(name, name)


def charset_from_transfer_encoding(encoding_name: Optional[str]) -> Optional[str]:
    """Guess a charset from a transfer encoding (8bit or 7bit only)."""
    return TRANSFER_ENCODING_CHARSETS.get((encoding_name or '').strip().lower())


def is_latin1(charset: str) -> bool:
    try:
        return codecs.lookup(charset).name == 'iso8859-1'
    except LookupError:
        return False


def is_valid_utf8(data: bytes) -> bool:
    try:
        data.decode('utf-8')
    except UnicodeDecodeError:
        return False
    return True


class Converter(Protocol):
    """Converts bytes in a named charset to str. Raises on failure."""

    def convert(self, data: bytes, charset: str) -> str:
        ...


class Detector(Protocol):
    """Picks the charset of some bytes from an ordered candidate list."""

    def detect(self, data: bytes, candidates: Sequence[str]) -> Optional[str]:
        ...


class CodecConverter:
    """Converter backed by Python's codec registry (strict decoding)."""

    def convert(self, data: bytes, charset: str) -> str:
        return data.decode(charset)


class CandidateListDetector:
    """Returns the first candidate that decodes the bytes without error."""

    def detect(self, data: bytes, candidates: Sequence[str]) -> Optional[str]:
        for candidate in candidates:
            try:
                data.decode(candidate)
            except (UnicodeDecodeError, LookupError):
                continue
            return candidate
        return None


class CharsetNormalizerDetector:
    """
    Detector backed by charset-normalizer, restricted to the candidates.

    Falls back to CandidateListDetector when charset-normalizer has no
    opinion (very short or ambiguous input).
    """

    def __init__(self, fallback: Optional[Detector] = None):
        self._fallback = fallback or CandidateListDetector()

    def detect(self, data: bytes, candidates: Sequence[str]) -> Optional[str]:
        best = charset_normalizer.from_bytes(data, cp_isolation=list(candidates)).best()
        if best is not None:
            return best.encoding
        return self._fallback.detect(data, candidates)


class CharsetManager:
    """
    Converts octets in a declared or detected charset to str.

    Never raises: when a charset is unknown or conversion fails, the bytes
    are decoded as UTF-8 with replacement characters.
    """

    def __init__(
        self,
        converter: Optional[Converter] = None,
        detector: Optional[Detector] = None,
        candidates: Sequence[str] = DETECTION_CANDIDATES,
    ):
        self.converter = converter or CodecConverter()
        self.detector = detector or CandidateListDetector()
        self.candidates = tuple(candidates)

    def normalize(self, data: bytes, declared_charset: Optional[str] = None) -> str:
        """
        Convert data to text.

        Args:
            data: Raw octets (already transfer-decoded)
            declared_charset: Charset label from the message, may be empty

        Returns:
            str: Decoded text (best effort)
        """
        if not data:
            return ''

        charset = charset_alias(declared_charset)

        if not charset or charset == 'utf-8':
            try:
                return data.decode('utf-8')
            except UnicodeDecodeError:
                pass
            return self._convert_detected(data)

        return self._convert(data, charset)

    def _convert_detected(self, data: bytes) -> str:
        """
        Convert data in the charset the detector picks.

        iso-8859-1 is read as windows-1252, its byte-compatible superset.
        """
        detected = self.detector.detect(data, self.candidates)
        if not detected or not is_latin1(detected):
            return self._convert(data, detected)

        # 0x81, 0x8D, 0x8F, 0x90 and 0x9D have no windows-1252 mapping
        try:
            return self.converter.convert(data, 'windows-1252')
        except UnicodeError:
            logger.debug("Bytes undefined in windows-1252, converting as iso-8859-1")
        return self._convert(data, detected)

    def _convert(self, data: bytes, charset: Optional[str]) -> str:
        if not charset:
            logger.debug("No charset detected, decoding as UTF-8 with replacement")
            return self._fallback(data)

        try:
            return self.converter.convert(data, charset)
        except LookupError:
            logger.warning(f"Unknown charset '{charset}', decoding as UTF-8 with replacement")
        except UnicodeError as e:
            logger.warning(f"Failed to convert from '{charset}': {e}")
        return self._fallback(data)

    @staticmethod
    def _fallback(data: bytes) -> str:
        return data.decode('utf-8', errors='replace')
