"""
Message Framing Module

Splits the byte stream of a connection into protocol messages.

TCP delivers a byte stream, not messages, so bytes are buffered:
- When a read contains newlines, every complete line is one message and
  the unterminated tail waits for the next read.
- When a read contains no newline at all, the buffered bytes form one
  message. Clients that write a bare token or command without a line
  terminator are therefore served one message per write.

Each read is bounded by max_chunk bytes, so a peer can never make the
server buffer more than one chunk plus one unterminated tail.
"""

from asyncio import StreamReader
from collections import deque
from typing import Deque, Optional

from ..config.settings import settings


class MessageReader:
    """
    Reads framed messages from an asyncio StreamReader.

    Usage:
        messages = MessageReader(reader)
        while (message := await messages.read_message()) is not None:
            ...

    Attributes:
        max_chunk: Maximum number of bytes requested per read
    """

    def __init__(self, reader: StreamReader, max_chunk: int = None):
        self._reader = reader
        self.max_chunk = max_chunk if max_chunk is not None else settings.READ_BUFFER_SIZE
        self._buffer = b""
        self._pending: Deque[bytes] = deque()
        self._eof = False

    async def read_message(self) -> Optional[bytes]:
        """
        Return the next message without its line terminator.

        Returns:
            Message bytes (possibly empty for a blank line), or None once
            the peer has closed the connection and nothing is buffered.
        """
        while not self._pending:
            if self._eof:
                return None

            chunk = await self._reader.read(self.max_chunk)
            if not chunk:
                self._eof = True
                if self._buffer:
                    self._pending.append(self._buffer)
                    self._buffer = b""
                continue

            self._feed(chunk)

        return self._pending.popleft()

    def _feed(self, chunk: bytes) -> None:
        if b"\n" not in chunk:
            self._pending.append(self._buffer + chunk)
            self._buffer = b""
            return

        *lines, self._buffer = (self._buffer + chunk).split(b"\n")
        for line in lines:
            self._pending.append(line.rstrip(b"\r"))
