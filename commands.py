"""
Command dispatch for the interactive shell and for startup arguments
"""
import ipaddress
import logging
from typing import Any, List, Protocol

from errors import ExitRequested, UnknownCommandError, UsageError
from node_address import NodeAddress, parse_node_address
from server_info import ServerInfo, render_server_info

logger = logging.getLogger(__name__)

DEFAULT_PORT = 4840

HELP_TEXT = """Available commands:
  connect <endpoint>  - Connect to OPC UA server
  disconnect          - Disconnect from server
  read <node-id>      - Read the value of a node (e.g. i=2259, ns=2;s=Tag)
  info                - Show server information
  help                - Show this help
  exit, quit          - Exit the program"""


class Connector(Protocol):
    """Session operations the dispatcher needs"""

    @property
    def is_connected(self) -> bool: ...

    async def connect(self, endpoint: str) -> None: ...

    async def disconnect(self) -> None: ...

    async def read_node(self, address: NodeAddress) -> Any: ...

    async def server_info(self) -> ServerInfo: ...


def is_ipv4(text: str) -> bool:
    try:
        ipaddress.IPv4Address(text)
    except ValueError:
        return False
    return True


class CommandDispatcher:
    def __init__(self, connector: Connector):
        self.connector = connector

    async def execute(self, line: str) -> None:
        """
        Execute one line of shell input

        Raises:
            ExitRequested: For ``exit`` and ``quit``
            UsageError: When a command gets the wrong number of arguments
            UnknownCommandError: For anything not listed in the help text
            OpcliError: Whatever the session raises for connect or read
        """
        parts = line.split()
        if not parts:
            return

        command, args = parts[0], parts[1:]
        logger.debug(f"Dispatching {command} with arguments {args}")

        if command == "help":
            print(HELP_TEXT)
        elif command == "connect":
            if len(args) != 1:
                raise UsageError("usage: connect <endpoint>")
            await self._connect(args[0])
        elif command == "disconnect":
            await self.connector.disconnect()
        elif command == "read":
            if len(args) != 1:
                raise UsageError("usage: read <node-id>")
            await self._read(args[0])
        elif command == "info":
            await self._info()
        elif command in ("exit", "quit"):
            raise ExitRequested()
        else:
            raise UnknownCommandError(command)

    async def parse_startup_arguments(self, argv: List[str]) -> None:
        """
        Handle the startup shortcuts

        ``prog <ipv4>`` connects to ``opc.tcp://<ipv4>:4840`` and
        ``prog connect <endpoint>`` connects to the endpoint. Any other
        shape starts the shell disconnected.

        Args:
            argv: Process arguments, program name first
        """
        logger.debug(f"Startup arguments: {argv[1:]}")
        if len(argv) == 2 and is_ipv4(argv[1]):
            await self._connect(f"opc.tcp://{argv[1]}:{DEFAULT_PORT}")
            return

        if len(argv) >= 2 and argv[1] == "connect":
            if len(argv) < 3:
                raise UsageError("usage: connect <endpoint>")
            await self._connect(argv[2])

    async def _connect(self, endpoint: str) -> None:
        if not endpoint:
            raise UsageError("endpoint cannot be empty")
        await self.connector.connect(endpoint)

    async def _read(self, text: str) -> None:
        address = parse_node_address(text)
        value = await self.connector.read_node(address)
        print(f"{address} = {value}")

    async def _info(self) -> None:
        if not self.connector.is_connected:
            print("Not connected")
            return
        print(render_server_info(await self.connector.server_info()))
