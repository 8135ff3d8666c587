"""
RFC 822 address-list parsing.

Handles plain mailboxes, "Name <addr>" forms, trailing comments used as a
name ("addr (Name)") and groups ("Team: a@x, b@y;"), which are expanded
into their members. Malformed input yields whatever can be recovered.
"""

import logging
import re
from typing import List, Optional, Tuple

from ..domain.models import AddressEntry
from .headers import HeaderDecoder

logger = logging.getLogger(__name__)

_SPACE_AROUND_DELIMITER = re.compile(r'\s*([@.])\s*')


def _scan_mailboxes(raw: str) -> Tuple[List[str], Optional[int]]:
    """
    Split raw at top-level separators.

    Returns the chunks and, when the scan ends inside a quote, comment or
    angle bracket, the index of the character that opened it.
    """
    chunks = []
    current = []
    in_quote = False
    in_angle = False
    comment_depth = 0
    escaped = False
    opened = {}

    for index, char in enumerate(raw):
        if escaped:
            current.append(char)
            escaped = False
            continue
        if char == '\\' and (in_quote or comment_depth):
            current.append(char)
            escaped = True
            continue
        if in_quote:
            current.append(char)
            if char == '"':
                in_quote = False
            continue
        if comment_depth:
            current.append(char)
            if char == '(':
                comment_depth += 1
            elif char == ')':
                comment_depth -= 1
            continue

        if char == '"':
            in_quote = True
            opened['"'] = index
        elif char == '(':
            comment_depth = 1
            opened['('] = index
        elif char == '<':
            if not in_angle:
                opened['<'] = index
            in_angle = True
        elif char == '>':
            in_angle = False
        elif not in_angle and char in ',;':
            chunks.append(''.join(current))
            current = []
            continue
        elif not in_angle and char == ':':
            # group label
            current = []
            continue
        current.append(char)

    chunks.append(''.join(current))
    chunks = [chunk.strip() for chunk in chunks if chunk.strip()]
    if in_quote:
        return chunks, opened['"']
    if comment_depth:
        return chunks, opened['(']
    if in_angle:
        return chunks, opened['<']
    return chunks, None


def split_mailboxes(raw: str) -> List[str]:
    """
    Split an address list into one chunk per mailbox.

    Commas and semicolons separate mailboxes; a colon outside quotes,
    comments and angle brackets ends a group label, which is dropped.
    A quote, comment or angle bracket that is never closed is dropped
    and the list rescanned, so it cannot swallow the rest of the header.
    """
    while True:
        chunks, unclosed = _scan_mailboxes(raw)
        if unclosed is None:
            return chunks
        logger.debug(f"Dropping unclosed {raw[unclosed]!r} at {unclosed} in address list")
        raw = raw[:unclosed] + raw[unclosed + 1:]


def strip_comments(text: str) -> Tuple[str, List[str]]:
    """Remove top-level (comments) from text, returning text and comment bodies."""
    kept = []
    comments = []
    comment = []
    in_quote = False
    depth = 0
    escaped = False

    for char in text:
        if depth:
            if escaped:
                comment.append(char)
                escaped = False
            elif char == '\\':
                escaped = True
            elif char == '(':
                depth += 1
                comment.append(char)
            elif char == ')':
                depth -= 1
                if depth:
                    comment.append(char)
                else:
                    comments.append(' '.join(''.join(comment).split()))
                    comment = []
            else:
                comment.append(char)
            continue

        if escaped:
            escaped = False
        elif char == '\\' and in_quote:
            escaped = True
        elif char == '"':
            in_quote = not in_quote
        elif char == '(' and not in_quote:
            depth = 1
            kept.append(' ')
            continue
        kept.append(char)

    if comment:
        # unterminated comment
        comments.append(' '.join(''.join(comment).split()))
    return ''.join(kept), comments


def unquote_phrase(phrase: str) -> str:
    """Drop quoting and backslash escapes from a display-name phrase."""
    chars = []
    escaped = False
    for char in phrase:
        if escaped:
            chars.append(char)
            escaped = False
        elif char == '\\':
            escaped = True
        elif char != '"':
            chars.append(char)
    return ' '.join(''.join(chars).split())


def clean_address(text: str) -> str:
    """Normalise an addr-spec: drop source routes, stray brackets and whitespace."""
    text = text.strip().strip('<>').strip()
    if text.startswith('@') and ':' in text:
        text = text.split(':', 1)[1]
    text = ' '.join(text.split())
    return _SPACE_AROUND_DELIMITER.sub(r'\1', text)


def _find_angle(text: str) -> int:
    in_quote = False
    escaped = False
    for index, char in enumerate(text):
        if escaped:
            escaped = False
        elif char == '\\' and in_quote:
            escaped = True
        elif char == '"':
            in_quote = not in_quote
        elif char == '<' and not in_quote:
            return index
    return -1


def parse_mailbox(chunk: str) -> Optional[AddressEntry]:
    """Parse a single mailbox; None when nothing usable is left."""
    text, comments = strip_comments(chunk)
    angle = _find_angle(text)

    if angle != -1:
        close = text.find('>', angle)
        inner = text[angle + 1:close] if close != -1 else text[angle + 1:]
        address = clean_address(inner)
        display = unquote_phrase(text[:angle])
    else:
        address = clean_address(text)
        display = ''
        words = address.split()
        if len(words) > 1 and '"' not in address:
            # name-addr that lost its brackets
            at = max((i for i, word in enumerate(words) if '@' in word), default=None)
            if at is not None:
                address = words[at]
                display = ' '.join(words[:at] + words[at + 1:])

    if not display and comments:
        display = comments[-1]
    if not address and not display:
        return None

    return AddressEntry(display=display or address, address=address)


def parse_addresses(
    raw_header_value: Optional[str],
    header_decoder: Optional[HeaderDecoder] = None,
) -> List[AddressEntry]:
    """
    Parse an address-list header value.

    Args:
        raw_header_value: Value of a From/To/Cc-style header
        header_decoder: When given, display names are RFC 2047 decoded

    Returns:
        List of AddressEntry, in header order (empty for missing input)

    Example:
        >>> [e.address for e in parse_addresses("Team: a@x.com, b@y.com;")]
        ['a@x.com', 'b@y.com']
    """
    if not raw_header_value:
        return []

    entries = []
    for chunk in split_mailboxes(raw_header_value):
        entry = parse_mailbox(chunk)
        if entry is None:
            logger.debug(f"Skipping unparseable address fragment: {chunk!r}")
            continue
        if header_decoder is not None:
            entry = entry.with_display(header_decoder.decode(entry.display))
        entries.append(entry)

    return entries
