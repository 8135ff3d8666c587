"""
Backing stores for raw message bytes.

Every entity of one parsed message shares a single store and asks it for
absolute byte ranges. Ranges may be requested in any order.
"""

import logging
import threading
from typing import BinaryIO, Protocol

logger = logging.getLogger(__name__)


class StoreIOError(IOError):
    """Raised when the underlying byte source cannot be read."""


class BackingStore(Protocol):
    """Random-access source of raw message bytes."""

    def read_range(self, start: int, end: int) -> bytes:
        ...


class BytesStore:
    """
    Backing store over an immutable in-memory buffer.

    Safe to share between threads.
    """

    def __init__(self, data: bytes):
        self._data = bytes(data)

    def __len__(self) -> int:
        return len(self._data)

    def read_range(self, start: int, end: int) -> bytes:
        """
        Return bytes [start, end) of the buffer.

        Returns:
            bytes: Empty when start >= end or when start is negative
        """
        if start is None or end is None or start < 0 or start >= end:
            return b''
        return self._data[start:end]


class StreamStore:
    """
    Backing store over a seekable binary stream.

    Each read seeks to an absolute position first, so callers may ask for
    ranges out of order. A lock serialises seek+read pairs.
    """

    def __init__(self, stream: BinaryIO):
        self._stream = stream
        self._lock = threading.Lock()

    def read_range(self, start: int, end: int) -> bytes:
        """
        Seek to start and read end - start bytes.

        Raises:
            StoreIOError: If the stream cannot be seeked or read
        """
        if start is None or end is None or start < 0 or start >= end:
            return b''

        try:
            with self._lock:
                self._stream.seek(start)
                data = self._stream.read(end - start)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read bytes {start}-{end} from stream: {e}")
            raise StoreIOError(f"Failed to read bytes {start}-{end}: {e}") from e

        return data or b''
