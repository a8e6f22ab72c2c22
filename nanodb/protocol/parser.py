"""
Protocol Parser Module

This module handles parsing of raw protocol commands and formatting of responses.
"""

import re

from .commands import Command, CommandType, Response

_TTL_PATTERN = re.compile(r"[0-9]+")

COMMAND_NAMES = {
    "set": CommandType.SET,
    "get": CommandType.GET,
    "delete": CommandType.DELETE,
    "exit": CommandType.EXIT,
}


class ProtocolParser:
    """
    Parser for the NanoDB text protocol.

    Protocol Format:
        Request:  <command> [ARGS...]\n
        Response: <text>\n

    Commands (lowercase, case-sensitive):
        set <key> <json_value> [ttl] -> Set key '<key>' with JSON value '<value>'
        get <key>                    -> Value for '<key>': <value>
        delete <key>                 -> Deleted key '<key>'
        exit                         -> Goodbye!

    Value tokens after the key are joined back with single spaces, so a
    JSON value may contain whitespace. The last token is a TTL only if it
    is made of digits and at least one value token precedes it.
    Consequently `set n 1 2` stores `1` with a TTL of 2 seconds.
    """

    def parse_request(self, data: str) -> Command:
        """
        Parse a raw request string into a Command object.

        Args:
            data: Raw request string (may include trailing newline)

        Returns:
            Command object representing the parsed request. Missing
            arguments leave key/value empty (see Command.is_valid).

        Examples:
            >>> parser = ProtocolParser()
            >>> cmd = parser.parse_request('set user {"name": "Alice"} 60')
            >>> cmd.type == CommandType.SET
            True
            >>> cmd.value
            '{"name": "Alice"}'
            >>> cmd.ttl
            60
        """
        raw = data.strip()
        if not raw:
            return Command(type=CommandType.EMPTY, raw=raw)

        parts = raw.split()
        command_type = COMMAND_NAMES.get(parts[0], CommandType.UNKNOWN)

        if command_type == CommandType.SET:
            return self._parse_set(parts, raw)
        if command_type in (CommandType.GET, CommandType.DELETE):
            key = parts[1] if len(parts) > 1 else ""
            return Command(type=command_type, key=key, raw=raw)

        return Command(type=command_type, raw=raw)

    def _parse_set(self, parts: list, raw: str) -> Command:
        """
        Parse a set command.

        Format: set <key> <json_value> [ttl]
        """
        key = parts[1] if len(parts) > 1 else ""
        value_parts = parts[2:]

        ttl = None
        if len(value_parts) > 1 and _TTL_PATTERN.fullmatch(value_parts[-1]):
            ttl = int(value_parts[-1])
            value_parts = value_parts[:-1]

        return Command(
            type=CommandType.SET,
            key=key,
            value=" ".join(value_parts),
            ttl=ttl,
            raw=raw,
        )

    def format_response(self, response: Response) -> str:
        """
        Format a Response object into a protocol string.

        Returns:
            Response message WITH trailing newline.

        Examples:
            >>> parser = ProtocolParser()
            >>> parser.format_response(Response.deleted("foo"))
            "Deleted key 'foo'\\n"
        """
        return f"{response.message}\n"
