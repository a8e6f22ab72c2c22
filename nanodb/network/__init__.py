"""Network module for NanoDB."""

from .framing import MessageReader
from .tcp_server import NanoDBServer, Session

__all__ = ["MessageReader", "NanoDBServer", "Session"]
