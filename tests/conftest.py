"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

import asyncio
import socket
import pytest
import pytest_asyncio
from contextlib import closing
from typing import AsyncGenerator

from nanodb.cache.store import ExpiringStore
from nanodb.protocol.interpreter import CommandInterpreter
from nanodb.protocol.parser import ProtocolParser
from nanodb.network.tcp_server import NanoDBServer

TEST_TOKEN = "test-secret-token"


def find_free_port() -> int:
    """Find an available port for testing."""
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(('', 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


class FakeClock:
    """Manually advanced clock for deterministic expiration tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ============================================================================
# Store Fixtures
# ============================================================================

@pytest.fixture
def store() -> ExpiringStore:
    """Create a fresh ExpiringStore using the real monotonic clock."""
    return ExpiringStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def clocked_store(clock: FakeClock) -> ExpiringStore:
    """Create an ExpiringStore driven by the fake clock."""
    return ExpiringStore(clock=clock)


# ============================================================================
# Protocol Fixtures
# ============================================================================

@pytest.fixture
def parser() -> ProtocolParser:
    """Create a ProtocolParser instance."""
    return ProtocolParser()


@pytest.fixture
def interpreter(clocked_store: ExpiringStore) -> CommandInterpreter:
    """Create a CommandInterpreter on top of the fake-clock store."""
    return CommandInterpreter(clocked_store)


# ============================================================================
# Server Fixtures
# ============================================================================

@pytest.fixture
def server_port() -> int:
    """Get a free port for server testing."""
    return find_free_port()


@pytest_asyncio.fixture
async def server(server_port: int) -> AsyncGenerator[NanoDBServer, None]:
    """
    Create and start a server instance for testing.

    This fixture:
    1. Creates a NanoDBServer on a random free port
    2. Starts it in a background task
    3. Yields the server for testing
    4. Cleans up after the test
    """
    srv = NanoDBServer(host='127.0.0.1', port=server_port, auth_token=TEST_TOKEN)

    # Start server in background task
    server_task = asyncio.create_task(srv.start())

    # Wait for server to be ready
    await asyncio.sleep(0.1)

    yield srv

    # Cleanup
    await srv.stop()
    server_task.cancel()
    try:
        await server_task
    except asyncio.CancelledError:
        pass


# ============================================================================
# Client Fixtures
# ============================================================================

class AsyncClient:
    """
    Helper class for testing server interactions.

    Sends the authentication token on connect, then provides a simple
    request/response interface.

    Usage:
        async with AsyncClient('127.0.0.1', port) as client:
            response = await client.send_command('set key "value"')
            assert response == "Set key 'key' with JSON value '\"value\"'"
    """

    def __init__(self, host: str, port: int, token: str = TEST_TOKEN):
        self.host = host
        self.port = port
        self.token = token
        self.reader = None
        self.writer = None

    async def connect(self) -> None:
        """Establish connection to server and authenticate."""
        self.reader, self.writer = await asyncio.open_connection(
            self.host, self.port
        )
        self.writer.write(f"{self.token}\n".encode())
        await self.writer.drain()

    async def disconnect(self) -> None:
        """Close connection to server."""
        if self.writer:
            self.writer.close()
            try:
                await self.writer.wait_closed()
            except (ConnectionError, OSError):
                pass

    async def send_command(self, command: str) -> str:
        """
        Send a command and receive the response.

        Args:
            command: Command string (newline will be added if missing)

        Returns:
            Response string (stripped of trailing newline)
        """
        if not command.endswith('\n'):
            command += '\n'

        self.writer.write(command.encode())
        await self.writer.drain()

        response = await asyncio.wait_for(self.reader.readline(), timeout=5)
        return response.decode().rstrip('\n')

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()


@pytest.fixture
def client_factory(server_port: int):
    """
    Factory fixture to create authenticated test clients.

    Usage:
        async def test_something(server, client_factory):
            async with client_factory() as client:
                response = await client.send_command("get key")
    """
    def factory(token: str = TEST_TOKEN) -> AsyncClient:
        return AsyncClient('127.0.0.1', server_port, token)
    return factory


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
