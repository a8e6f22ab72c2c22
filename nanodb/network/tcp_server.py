"""
Async TCP Server Module

This module implements the asynchronous TCP server for NanoDB.

Each client connection is handled by its own coroutine:
1. Authentication handshake: the first message must equal the shared token
2. Command loop: read a message, run it through the CommandInterpreter,
   write the response, until the client disconnects or I/O fails

All connections share one ExpiringStore and one ExpirationSweeper.
"""

import asyncio
import hmac
import logging
from asyncio import StreamReader, StreamWriter
from dataclasses import dataclass
from typing import Any, Optional

from .framing import MessageReader
from ..cache.store import ExpiringStore
from ..cache.sweeper import ExpirationSweeper
from ..config.settings import settings
from ..protocol.commands import Response
from ..protocol.interpreter import CommandInterpreter

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """
    Per-connection state.

    Attributes:
        peer: Remote address of the client
        authenticated: True once the correct token has been received
        commands: Number of commands processed on this connection
    """
    peer: Any
    authenticated: bool = False
    commands: int = 0


class NanoDBServer:
    """
    Asynchronous TCP server for the NanoDB service.

    Features:
    - Non-blocking I/O with asyncio, one coroutine per connection
    - Shared-token authentication (single attempt per connection)
    - Persistent connections (multiple commands per connection)
    - Background sweep of expired keys
    - Shared ExpiringStore across all connections

    Usage:
        server = NanoDBServer(port=7878, auth_token="secret")
        await server.start()  # Runs forever

    Attributes:
        host: Server bind address (e.g., '0.0.0.0')
        port: Server port number (e.g., 7878)
        store: The ExpiringStore instance shared by all connections
        interpreter: The CommandInterpreter executing commands on the store
        sweeper: The ExpirationSweeper for the store
    """

    def __init__(
            self,
            host: str = None,
            port: int = None,
            auth_token: str = None,
            store: ExpiringStore = None,
            sweep_interval: float = None,
    ):
        """
        Initialize the server.

        Args:
            host: Bind address (default from settings)
            port: Port number (default from settings)
            auth_token: Shared secret clients must send first (default from settings)
            store: ExpiringStore instance (creates new one if not provided)
            sweep_interval: Seconds between expiration sweeps (default from settings)

        Raises:
            ValueError: If no authentication token is configured
        """
        self.host = host if host is not None else settings.HOST
        self.port = port if port is not None else settings.PORT
        auth_token = auth_token if auth_token is not None else settings.AUTH_TOKEN
        if not auth_token:
            raise ValueError("An authentication token must be configured")
        self._auth_token = auth_token.encode()

        self.store = store if store is not None else ExpiringStore()
        self.interpreter = CommandInterpreter(self.store)
        self.sweeper = ExpirationSweeper(self.store, interval=sweep_interval)

        # Server state
        self._server: Optional[asyncio.Server] = None
        self._running = False
        self._connection_count = 0
        self._rejected_count = 0
        self._total_requests = 0
        self._error_responses = 0

    async def handle_client(
            self,
            reader: StreamReader,
            writer: StreamWriter
    ) -> None:
        """
        Handle a single client connection.

        Args:
            reader: StreamReader for reading from the client
            writer: StreamWriter for writing to the client

        Protocol flow:
            1. Read the token message; close on EOF or mismatch
            2. Read a message (command) from the client
            3. Execute it through the CommandInterpreter
            4. Send the response
            5. Repeat until the client disconnects or I/O fails

        The `exit` command only produces a farewell; the connection stays
        open until the client closes it.
        """
        session = Session(peer=writer.get_extra_info('peername'))
        messages = MessageReader(reader, settings.READ_BUFFER_SIZE)
        self._connection_count += 1
        logger.info(f"New client connected from {session.peer}")

        try:
            if not await self._authenticate(session, messages, writer):
                return

            while True:
                data = await messages.read_message()
                if data is None:
                    logger.info(f"Client {session.peer} disconnected")
                    break

                session.commands += 1
                self._total_requests += 1
                parser = self.interpreter.parser
                command = parser.parse_request(data.decode(errors="replace"))
                response = self.interpreter.execute(command)
                if not response.is_ok:
                    self._error_responses += 1

                writer.write(parser.format_response(response).encode())
                await writer.drain()

        except (ConnectionResetError, BrokenPipeError) as exc:
            logger.debug(f"Connection lost with client {session.peer}: {exc}")
        except Exception as exc:  # Log unexpected errors but keep server alive
            logger.exception(f"Error handling client {session.peer}: {exc}")
        finally:
            try:
                writer.close()
                await writer.wait_closed()
            except (ConnectionError, OSError):
                pass

    async def _authenticate(
            self,
            session: Session,
            messages: MessageReader,
            writer: StreamWriter
    ) -> bool:
        """
        Perform the one-shot token handshake.

        Returns:
            True if the client may proceed to the command loop
        """
        data = await messages.read_message()
        if data is None:
            logger.info(f"Client {session.peer} disconnected")
            return False

        if not hmac.compare_digest(data.strip(), self._auth_token):
            self._rejected_count += 1
            logger.error(f"Client {session.peer} provided invalid token")
            response = Response.invalid_token()
            writer.write(self.interpreter.parser.format_response(response).encode())
            await writer.drain()
            return False

        session.authenticated = True
        logger.info(f"Client {session.peer} authenticated successfully")
        return True

    async def start(self) -> None:
        """
        Start the server and begin accepting connections.

        This method binds the listener, starts the expiration sweeper
        and runs forever (or until cancelled).

        Raises:
            OSError: If the listener cannot be bound

        Example:
            server = NanoDBServer(port=7878, auth_token="secret")
            asyncio.run(server.start())
        """
        if self._running:
            return

        self._server = await asyncio.start_server(
            self.handle_client,
            self.host,
            self.port,
        )
        self._running = True
        self.sweeper.start()

        addrs = ', '.join(str(sock.getsockname()) for sock in self._server.sockets or [])
        logger.info(f"Server running on {addrs}")

        try:
            async with self._server:
                await self._server.serve_forever()
        except asyncio.CancelledError:
            # Expected during shutdown/fixture cleanup
            logger.debug("Server start cancelled")
        finally:
            self._running = False

    async def stop(self) -> None:
        """
        Stop the server gracefully.

        Closes the listener, stops the sweeper and waits for both.
        """
        await self.sweeper.stop()

        if self._server is None:
            return

        self._server.close()
        try:
            await self._server.wait_closed()
        finally:
            self._server = None
            self._running = False

    def is_running(self) -> bool:
        """Check if the server is currently running."""
        return self._running

    def get_stats(self) -> dict:
        """
        Get server statistics.

        Returns:
            Dictionary with server stats including connection counts,
            request counts, and store statistics.
        """
        return {
            "running": self._running,
            "host": self.host,
            "port": self.port,
            "total_connections": self._connection_count,
            "rejected_connections": self._rejected_count,
            "total_requests": self._total_requests,
            "error_responses": self._error_responses,
            "expired_by_sweeper": self.sweeper.total_removed,
            "store_stats": self.store.get_stats(),
        }
