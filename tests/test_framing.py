"""
Tests for message framing

MessageReader is fed through a real asyncio.StreamReader, with chunks
pushed by the test to mimic what the network delivers per read.

Run with: python -m pytest tests/test_framing.py -v
"""

import asyncio
import pytest

from nanodb.network.framing import MessageReader


def make_reader(*chunks: bytes, eof: bool = True) -> asyncio.StreamReader:
    reader = asyncio.StreamReader()
    for chunk in chunks:
        reader.feed_data(chunk)
    if eof:
        reader.feed_eof()
    return reader


async def read_all(messages: MessageReader) -> list:
    result = []
    while (message := await messages.read_message()) is not None:
        result.append(message)
    return result


@pytest.mark.asyncio
class TestMessageReader:
    """Test splitting the byte stream into messages."""

    async def test_single_line(self):
        messages = MessageReader(make_reader(b"get key\n"))
        assert await read_all(messages) == [b"get key"]

    async def test_multiple_lines_in_one_read(self):
        messages = MessageReader(make_reader(b"token\nset a 1\nget a\n"))
        assert await read_all(messages) == [b"token", b"set a 1", b"get a"]

    async def test_crlf_is_stripped(self):
        messages = MessageReader(make_reader(b"get a\r\nget b\r\n"))
        assert await read_all(messages) == [b"get a", b"get b"]

    async def test_blank_line_is_an_empty_message(self):
        messages = MessageReader(make_reader(b"\n"))
        assert await read_all(messages) == [b""]

    async def test_read_without_newline_is_one_message(self):
        """Test a bare write without terminator is served as one message."""
        reader = asyncio.StreamReader()
        messages = MessageReader(reader)

        reader.feed_data(b"secret-token")
        assert await messages.read_message() == b"secret-token"

        reader.feed_data(b"get key")
        assert await messages.read_message() == b"get key"

    async def test_tail_is_joined_with_next_read(self):
        reader = asyncio.StreamReader()
        messages = MessageReader(reader)

        reader.feed_data(b"get a\nset b ")
        assert await messages.read_message() == b"get a"

        reader.feed_data(b'"x"\n')
        assert await messages.read_message() == b'set b "x"'

    async def test_tail_flushed_at_eof(self):
        messages = MessageReader(make_reader(b"get a\nget b"))
        assert await read_all(messages) == [b"get a", b"get b"]

    async def test_eof_without_data(self):
        messages = MessageReader(make_reader())
        assert await messages.read_message() is None
        assert await messages.read_message() is None

    async def test_reads_are_bounded(self):
        """Test a long unterminated write is split into bounded messages."""
        messages = MessageReader(make_reader(b"x" * 20), max_chunk=8)
        assert await read_all(messages) == [b"x" * 8, b"x" * 8, b"x" * 4]
