"""
Tests for the interactive client and the server entry point

Run with: python -m pytest tests/test_client.py -v
"""

import asyncio
import pytest

from nanodb.client import NanoDBClient
from nanodb.server import parse_args
from tests.conftest import TEST_TOKEN


@pytest.mark.asyncio
class TestNanoDBClient:
    """Drive the blocking client from a worker thread against a live server."""

    async def test_round_trip(self, server, server_port):
        def session() -> list:
            with NanoDBClient('127.0.0.1', server_port, TEST_TOKEN) as client:
                return [
                    client.send_command('set greeting "hello world"'),
                    client.send_command("get greeting"),
                    client.send_command("exit"),
                    client.send_command("delete greeting"),
                ]

        assert await asyncio.to_thread(session) == [
            "Set key 'greeting' with JSON value '\"hello world\"'",
            "Value for 'greeting': \"hello world\"",
            "Goodbye!",
            "Deleted key 'greeting'",
        ]


class TestNanoDBClientOffline:

    def test_not_connected(self):
        client = NanoDBClient('127.0.0.1', 1, TEST_TOKEN)
        assert client.send_command("get key") == "ERROR: Not connected"


class TestParseArgs:
    """Test startup argument validation."""

    def test_token_from_flag(self):
        args = parse_args(["--auth-token", "secret", "--port", "9000"])
        assert args.auth_token == "secret"
        assert args.port == 9000
        assert args.sweep_interval > 0

    def test_missing_token_is_fatal(self):
        with pytest.raises(SystemExit) as excinfo:
            parse_args(["--auth-token", ""])
        assert excinfo.value.code == 2

    def test_non_positive_sweep_interval_is_fatal(self):
        with pytest.raises(SystemExit):
            parse_args(["--auth-token", "secret", "--sweep-interval", "0"])
