"""Protocol module for NanoDB."""

from .commands import Command, CommandType, Response, ResponseStatus
from .interpreter import CommandInterpreter, canonicalize_json
from .parser import ProtocolParser

__all__ = [
    "Command",
    "CommandType",
    "Response",
    "ResponseStatus",
    "ProtocolParser",
    "CommandInterpreter",
    "canonicalize_json",
]
