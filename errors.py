"""
Error types shared by the opcli modules
"""
from enum import Enum
from typing import Any, Optional


class OpcliError(Exception):
    """Base class for every error the shell reports to the operator"""


class ParseError(OpcliError, ValueError):
    """Node address text could not be parsed"""


class ConnectErrorKind(Enum):
    CREATE_FAILED = "create_failed"
    HANDSHAKE_FAILED = "handshake_failed"


class ConnectError(OpcliError):
    def __init__(self, kind: ConnectErrorKind, endpoint: str, cause: Exception):
        self.kind = kind
        self.endpoint = endpoint
        self.cause = cause
        if kind is ConnectErrorKind.CREATE_FAILED:
            message = f"failed to create client: {cause}"
        else:
            message = f"failed to connect: {cause}"
        super().__init__(message)


class ReadErrorKind(Enum):
    NOT_CONNECTED = "not_connected"
    TRANSPORT_FAILURE = "transport_failure"
    EMPTY_RESULT = "empty_result"
    BAD_STATUS = "bad_status"


class ReadError(OpcliError):
    """
    A single-node read did not produce a value

    Args:
        kind: Why the read failed
        node: Textual node address that was read
        status: Status code returned by the server (BAD_STATUS only)
        cause: Underlying transport exception (TRANSPORT_FAILURE only)
    """

    def __init__(
        self,
        kind: ReadErrorKind,
        node: str = "",
        status: Optional[Any] = None,
        cause: Optional[Exception] = None,
    ):
        self.kind = kind
        self.node = node
        self.status = status
        self.cause = cause
        super().__init__(self._describe())

    def _describe(self) -> str:
        if self.kind is ReadErrorKind.NOT_CONNECTED:
            return "not connected to server"
        if self.kind is ReadErrorKind.TRANSPORT_FAILURE:
            return f"read of {self.node} failed: {self.cause}"
        if self.kind is ReadErrorKind.EMPTY_RESULT:
            return f"read of {self.node} returned no results"
        name = getattr(self.status, "name", self.status)
        return f"bad status for {self.node}: {name}"


class DispatchError(OpcliError):
    """A command line could not be executed"""


class UsageError(DispatchError):
    pass


class UnknownCommandError(DispatchError):
    def __init__(self, command: str):
        self.command = command
        super().__init__(
            f"unknown command: {command}. Type 'help' for available commands"
        )


class ExitRequested(DispatchError):
    """Sentinel raised by `exit` and `quit`; ends the shell loop"""

    def __init__(self):
        super().__init__("exit")
