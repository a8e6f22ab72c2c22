"""
Protocol Command and Response Definitions

This module defines the data structures for protocol commands and responses.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class CommandType(Enum):
    """Enumeration of supported command types."""
    SET = auto()
    GET = auto()
    DELETE = auto()
    EXIT = auto()
    EMPTY = auto()
    UNKNOWN = auto()


class ResponseStatus(Enum):
    """Enumeration of response statuses."""
    OK = "OK"
    ERROR = "ERROR"


USAGE = {
    CommandType.SET: "Usage: set <key> <json_value> [ttl]",
    CommandType.GET: "Usage: get <key>",
    CommandType.DELETE: "Usage: delete <key>",
}


@dataclass
class Command:
    """
    Represents a parsed protocol command.

    Attributes:
        type: The type of command (SET, GET, DELETE, EXIT, EMPTY, UNKNOWN)
        key: The key for the operation (empty if missing)
        value: The raw value text for SET operations (empty if missing)
        ttl: Time-to-live in seconds for SET operations (None = no expiration)
        raw: The original raw command string
    """
    type: CommandType
    key: str = ""
    value: str = ""
    ttl: Optional[int] = None
    raw: str = ""

    @property
    def is_valid(self) -> bool:
        """Check if the command carries the arguments its type requires."""
        if self.type in (CommandType.EMPTY, CommandType.UNKNOWN):
            return False
        if self.type == CommandType.EXIT:
            return True
        if self.type in (CommandType.GET, CommandType.DELETE):
            return bool(self.key)
        if self.type == CommandType.SET:
            return bool(self.key) and bool(self.value)
        return False


@dataclass
class Response:
    """
    Represents a protocol response.

    Attributes:
        status: OK or ERROR
        message: Text sent back to the client (without newline)
    """
    status: ResponseStatus
    message: str = ""

    @property
    def is_ok(self) -> bool:
        return self.status == ResponseStatus.OK

    @classmethod
    def ok(cls, message: str) -> "Response":
        """Create a successful response."""
        return cls(status=ResponseStatus.OK, message=message)

    @classmethod
    def error(cls, message: str) -> "Response":
        """Create an error response."""
        return cls(status=ResponseStatus.ERROR, message=message)

    @classmethod
    def stored(cls, key: str, value: str) -> "Response":
        """Create the response for a successful SET."""
        return cls.ok(f"Set key '{key}' with JSON value '{value}'")

    @classmethod
    def value_response(cls, key: str, value: str) -> "Response":
        """Create a GET response with a value."""
        return cls.ok(f"Value for '{key}': {value}")

    @classmethod
    def not_found_or_expired(cls, key: str) -> "Response":
        """Create the GET miss response."""
        return cls.error(f"Key '{key}' not found or expired")

    @classmethod
    def deleted(cls, key: str) -> "Response":
        """Create a 'deleted' response for DELETE operations."""
        return cls.ok(f"Deleted key '{key}'")

    @classmethod
    def key_not_found(cls, key: str) -> "Response":
        """Create the DELETE miss response."""
        return cls.error(f"Key '{key}' not found")

    @classmethod
    def goodbye(cls) -> "Response":
        return cls.ok("Goodbye!")

    @classmethod
    def invalid_json(cls) -> "Response":
        return cls.error("Invalid JSON format")

    @classmethod
    def invalid_command(cls) -> "Response":
        """Create the response for an empty line."""
        return cls.error("Invalid command")

    @classmethod
    def unknown_command(cls) -> "Response":
        return cls.error("Unknown command")

    @classmethod
    def usage(cls, command_type: CommandType) -> "Response":
        """Create a usage error naming the expected arguments."""
        return cls.error(USAGE[command_type])

    @classmethod
    def invalid_token(cls) -> "Response":
        """Create the handshake rejection response."""
        return cls.error("Invalid authentication token.")
