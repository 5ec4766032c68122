"""
OPC UA session: owns the single asyncua client used by the shell
"""
import asyncio
import logging
from typing import Any, Callable, Optional

from asyncua import Client, ua

from errors import ConnectError, ConnectErrorKind, ReadError, ReadErrorKind
from node_address import NodeAddress
from server_info import ServerInfo, probe_server_info, render_server_info

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 4.0
# Oldest cached value the server may return, in milliseconds
READ_MAX_AGE = 2000


def _log_close_error(closing: asyncio.Future):
    if not closing.cancelled() and closing.exception() is not None:
        logger.warning(f"Error while closing connection: {closing.exception()}")


def new_client(url: str, timeout: float = DEFAULT_TIMEOUT) -> Client:
    """
    Build an unconnected OPC UA client

    Args:
        url: OPC UA server endpoint URL
        timeout: Request timeout in seconds

    Returns:
        asyncua Client, not yet connected
    """
    return Client(url=url, timeout=timeout)


class ProtocolSession:
    """
    Holds at most one connected client.

    Operations must not overlap; the shell awaits each one before reading
    the next command.
    """

    def __init__(
        self,
        client_factory: Optional[Callable[[str], Client]] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._client_factory = client_factory or (lambda url: new_client(url, timeout))
        self._client: Optional[Client] = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_value, traceback):
        await self.disconnect()

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    @property
    def client(self) -> Optional[Client]:
        return self._client

    async def connect(self, endpoint: str) -> None:
        """
        Connect to an endpoint, replacing any existing connection

        On success the server identity is probed and printed; probe
        problems are only logged.

        Raises:
            ConnectError: If the client could not be built or the handshake failed.
                The session is left disconnected.
        """
        if self._client is not None:
            logger.info("Already connected. Disconnecting first.")
            await self.disconnect()

        logger.info(f"Connecting to {endpoint}...")
        try:
            client = self._client_factory(endpoint)
        except Exception as e:
            raise ConnectError(ConnectErrorKind.CREATE_FAILED, endpoint, e) from e

        try:
            await client.connect()
        except Exception as e:
            raise ConnectError(ConnectErrorKind.HANDSHAKE_FAILED, endpoint, e) from e

        self._client = client
        logger.info("Successfully connected!")

        try:
            print(render_server_info(await self.server_info()))
        except Exception as e:
            logger.warning(f"Could not retrieve server info: {e}")

    async def disconnect(self) -> None:
        if self._client is None:
            return
        client = self._client
        self._client = None
        logger.info("Disconnecting...")
        closing = asyncio.ensure_future(client.disconnect())
        try:
            await asyncio.shield(closing)
        except asyncio.CancelledError:
            # finish closing before the cancellation propagates
            await asyncio.wait([closing])
            _log_close_error(closing)
            raise
        except Exception as e:
            logger.warning(f"Error while closing connection: {e}")

    async def read_node(self, address: NodeAddress) -> Any:
        """
        Read the Value attribute of one node

        Args:
            address: Node to read

        Returns:
            Decoded value of the node

        Raises:
            ReadError: If not connected, the request failed, the server
                returned no result, or the status was not Good.
        """
        node = str(address)
        if self._client is None:
            raise ReadError(ReadErrorKind.NOT_CONNECTED, node)

        rv = ua.ReadValueId()
        rv.NodeId = address.to_nodeid()
        rv.AttributeId = ua.AttributeIds.Value
        params = ua.ReadParameters()
        params.MaxAge = READ_MAX_AGE
        params.TimestampsToReturn = ua.TimestampsToReturn.Both
        params.NodesToRead = [rv]

        try:
            results = await self._client.uaclient.read(params)
        except Exception as e:
            raise ReadError(ReadErrorKind.TRANSPORT_FAILURE, node, cause=e) from e

        if not results:
            raise ReadError(ReadErrorKind.EMPTY_RESULT, node)

        result = results[0]
        status = result.StatusCode
        if status is not None and status.value != ua.StatusCodes.Good:
            raise ReadError(ReadErrorKind.BAD_STATUS, node, status=status)

        logger.debug(f"Read {node}: {result.Value}")
        return result.Value.Value if result.Value is not None else None

    async def server_info(self) -> ServerInfo:
        return await probe_server_info(self)
