from .base import BufferOverflowError

DEFAULT_MAX_BYTES = 10 * 1024 * 1024


class ResponseBuffer:
    """
    Growable byte buffer for one fetch attempt, bounded by max_bytes.

    An append that would cross the bound is refused as a whole and raises
    BufferOverflowError; the buffer keeps what it had before the call.
    """

    def __init__(self, max_bytes: int = DEFAULT_MAX_BYTES):
        if max_bytes <= 0:
            raise ValueError("max_bytes must be positive")
        self.max_bytes = max_bytes
        self._data = bytearray()

    @property
    def size(self) -> int:
        return len(self._data)

    def append(self, chunk: bytes) -> None:
        if self.size + len(chunk) > self.max_bytes:
            raise BufferOverflowError(
                f"response exceeds {self.max_bytes} bytes "
                f"(had {self.size}, chunk of {len(chunk)})"
            )
        self._data.extend(chunk)

    def reset(self) -> None:
        self._data.clear()

    def getvalue(self) -> bytes:
        return bytes(self._data)

    def text(self, encoding: str = "utf-8") -> str:
        try:
            return self._data.decode(encoding or "utf-8", errors="replace")
        except LookupError:
            # unknown charset label from the server
            return self._data.decode("utf-8", errors="replace")

    def __len__(self) -> int:
        return self.size
