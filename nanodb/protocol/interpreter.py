"""
Command Interpreter Module

Executes parsed commands against the shared ExpiringStore and builds the
textual responses sent back to clients.
"""

import json
import logging
import math

from .commands import Command, CommandType, Response
from .parser import ProtocolParser
from ..cache.store import ExpiringStore

logger = logging.getLogger(__name__)


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def _parse_finite_float(text: str) -> float:
    number = float(text)
    if not math.isfinite(number):
        raise ValueError(f"number out of range: {text}")
    return number


def canonicalize_json(text: str) -> str:
    """
    Validate a JSON document and return its canonical compact form.

    The result is compact with sorted object keys. Number text follows
    Python's json module: `1e-7` is written `1e-07` and integers of any
    width stay exact.

    Raises:
        ValueError: If text is not valid JSON. NaN, Infinity, numbers
            overflowing a float, lone surrogates and nesting too deep to
            parse are all rejected.
    """
    try:
        value = json.loads(text, parse_constant=_reject_constant, parse_float=_parse_finite_float)
        result = json.dumps(value, separators=(",", ":"), sort_keys=True, ensure_ascii=False)
    except RecursionError:
        raise ValueError("JSON nested too deeply") from None

    # Lone surrogates survive loads() but can't be sent back over the wire
    result.encode("utf-8")
    return result


class CommandInterpreter:
    """
    Routes commands to the ExpiringStore.

    The interpreter holds no state of its own besides the store handle,
    so a single instance is shared by every connection.

    Usage:
        interpreter = CommandInterpreter(store)
        interpreter.process('set foo {"a": 1}')  # "Set key 'foo' with JSON value '{"a":1}'\\n"
    """

    def __init__(self, store: ExpiringStore, parser: ProtocolParser = None):
        self.store = store
        self.parser = parser if parser is not None else ProtocolParser()

    def process(self, line: str) -> str:
        """Parse, execute and format one request line."""
        command = self.parser.parse_request(line)
        return self.parser.format_response(self.execute(command))

    def execute(self, command: Command) -> Response:
        """
        Execute a parsed command on the store.

        Args:
            command: The Command object to execute

        Returns:
            Response object with the result. Protocol errors are returned
            as error responses, never raised.
        """
        if command.type == CommandType.EMPTY:
            logger.warning("Empty command received")
            return Response.invalid_command()

        if command.type == CommandType.UNKNOWN:
            logger.warning(f"Unknown command '{command.raw}'")
            return Response.unknown_command()

        if not command.is_valid:
            logger.warning(f"Missing arguments for '{command.raw}'")
            return Response.usage(command.type)

        if command.type == CommandType.SET:
            return self._set(command)

        if command.type == CommandType.GET:
            value = self.store.get(command.key)
            if value is None:
                logger.info(f"Key '{command.key}' not found or expired")
                return Response.not_found_or_expired(command.key)
            logger.info(f"Retrieved key '{command.key}'")
            return Response.value_response(command.key, value)

        if command.type == CommandType.DELETE:
            if self.store.delete(command.key):
                logger.info(f"Deleted key '{command.key}'")
                return Response.deleted(command.key)
            logger.info(f"Key '{command.key}' not found")
            return Response.key_not_found(command.key)

        logger.info("Client requested to disconnect")
        return Response.goodbye()

    def _set(self, command: Command) -> Response:
        try:
            value = canonicalize_json(command.value)
        except ValueError:
            logger.warning(f"Invalid JSON for key '{command.key}'")
            return Response.invalid_json()

        self.store.set(command.key, value, ttl=command.ttl)
        logger.info(f"Set key '{command.key}' with JSON value '{value}', TTL: {command.ttl}")
        return Response.stored(command.key, value)
