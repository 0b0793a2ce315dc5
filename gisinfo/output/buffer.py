"""Output buffering, to write data in chunks.

This builds on top of StringIO to collect the XML text and regularly flush it.
"""

from __future__ import annotations

import io


class StringBuffer:
    """Fast buffer to write text in chunks.
    This avoids encoding and writing each small fragment to the output sink.
    """

    def __init__(self, chunk_size=8192):
        self.data = io.StringIO()
        self.chunk_size = chunk_size

    def is_full(self):
        # Calling data.tell() is faster than doing self.size += len(value)
        # because each integer increment is a new object allocation.
        return self.data.tell() >= self.chunk_size

    def write(self, value: str):
        if value is None:
            return
        self.data.write(value)

    def flush(self) -> str:
        """Empty the buffer and return it."""
        data = self.getvalue()
        self.clear()
        return data

    def getvalue(self) -> str:
        return self.data.getvalue()

    def clear(self):
        self.data.seek(0)
        self.data.truncate(0)

    def __str__(self):
        return self.getvalue()
