#!/usr/bin/env python3
"""
Interactive Client for NanoDB

A simple command-line client for talking to a NanoDB server.

Usage:
    nanodb-cli --token secret                  # Connect to localhost:7878
    nanodb-cli --host 1.2.3.4 --token secret   # Connect to specific host
    AUTH_TOKEN=secret nanodb-cli --port 9000   # Token from the environment

Commands:
    set <key> <json_value> [ttl]  - Store a JSON value
    get <key>                     - Retrieve a value
    delete <key>                  - Delete a key
    exit                          - Server farewell (connection stays open)
    help                          - Show this help
    status                        - Show connection status
    reconnect                     - Reconnect and authenticate again
    quit                          - Exit client
"""

import argparse
import socket
import sys
from typing import List, Optional

from .config.settings import settings

# Enable command history with arrow keys (works on Unix systems)
try:
    import readline  # noqa: F401
except ImportError:
    pass  # readline not available on Windows by default


class NanoDBClient:
    """
    Simple blocking TCP client for NanoDB.

    The token is sent as the first line right after connecting. The
    server does not acknowledge a correct token, so a rejected token is
    only noticed on the first command (see send_command).
    """

    def __init__(self, host: str, port: int, token: str, timeout: float = 5.0):
        self.host = host
        self.port = port
        self.token = token
        self.timeout = timeout
        self.socket = None
        self._buffer = b''

    def connect(self) -> bool:
        """Connect to the server and send the authentication token."""
        try:
            self.socket = socket.create_connection((self.host, self.port), timeout=self.timeout)
            self.socket.sendall(f"{self.token}\n".encode('utf-8'))
            return True
        except OSError as e:
            print(f"Connection error: {e}")
            self.socket = None
            return False

    def disconnect(self):
        """Disconnect from the server."""
        if self.socket:
            try:
                self.socket.close()
            except OSError:
                pass
            self.socket = None
            self._buffer = b''

    def send_command(self, command: str) -> str:
        """Send a command and receive the response line."""
        if not self.socket:
            return "ERROR: Not connected"

        try:
            # Ensure command ends with newline
            if not command.endswith('\n'):
                command += '\n'

            self.socket.sendall(command.encode('utf-8'))
            return self._read_line()

        except socket.timeout:
            return "ERROR: Request timed out"
        except OSError as e:
            self.disconnect()
            return f"ERROR: {e}"

    def _read_line(self) -> str:
        while b'\n' not in self._buffer:
            chunk = self.socket.recv(4096)
            if not chunk:
                remainder = self._buffer.decode('utf-8', errors='replace').strip()
                self.disconnect()
                return remainder or "ERROR: Connection closed by server"
            self._buffer += chunk

        line, self._buffer = self._buffer.split(b'\n', 1)
        return line.decode('utf-8', errors='replace').strip()

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()


def print_help():
    """Print help message."""
    print("""
NanoDB Commands:
----------------
  set <key> <json_value> [ttl]  Store a JSON value (optional TTL in seconds)
  get <key>                     Retrieve the value for a key
  delete <key>                  Delete a key
  exit                          Ask the server to say goodbye

Client Commands:
----------------
  help                          Show this help message
  quit                          Exit the client
  reconnect                     Reconnect to the server
  status                        Show connection status

Examples:
---------
  set user {"name": "Alice"}    Store a JSON object under "user"
  set session "abc" 60          Store with 60 second TTL
  get user                      Get value for "user"
  delete user                   Delete "user"
""")


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        description="Interactive client for NanoDB"
    )
    parser.add_argument(
        "--host",
        type=str,
        default="localhost",
        help="Server host (default: localhost)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.PORT,
        help=f"Server port (default: {settings.PORT})"
    )
    parser.add_argument(
        "--token",
        type=str,
        default=settings.AUTH_TOKEN,
        help="Authentication token (default: $AUTH_TOKEN)"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=5.0,
        help="Socket timeout in seconds (default: 5.0)"
    )

    args = parser.parse_args(argv)
    if not args.token:
        parser.error("a token is required (--token or $AUTH_TOKEN)")

    print("NanoDB Client")
    print("=============")
    print(f"Connecting to {args.host}:{args.port}...")

    client = NanoDBClient(args.host, args.port, args.token, args.timeout)

    if not client.connect():
        print("Failed to connect. Is the server running?")
        print(f"  Try: AUTH_TOKEN=... python -m nanodb.server --port {args.port}")
        sys.exit(1)

    print("Connected! Type 'help' for commands.\n")

    try:
        while True:
            try:
                command = input(">>> ").strip()

                if not command:
                    continue

                # Handle client-side commands
                if command == "help":
                    print_help()
                    continue

                if command == "quit":
                    print("Goodbye!")
                    break

                if command == "reconnect":
                    client.disconnect()
                    if client.connect():
                        print("Reconnected!")
                    else:
                        print("Reconnection failed.")
                    continue

                if command == "status":
                    status = "Connected" if client.socket else "Disconnected"
                    print(f"Status: {status}")
                    print(f"Server: {args.host}:{args.port}")
                    continue

                print(client.send_command(command))

            except EOFError:
                print("\nGoodbye!")
                break

    except KeyboardInterrupt:
        print("\n\nInterrupted. Goodbye!")
    finally:
        client.disconnect()


if __name__ == "__main__":
    main()
