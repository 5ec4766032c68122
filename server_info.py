"""
Server identity probe: reads the well-known ServerStatus nodes of namespace 0
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional

from asyncua import ua

from errors import ReadError
from node_address import parse_node_address

logger = logging.getLogger(__name__)

# Server_ServerStatus_BuildInfo_* and Server_ServerStatus_State
PRODUCT_NAME_NODE = "i=2261"
MANUFACTURER_NAME_NODE = "i=2263"
SOFTWARE_VERSION_NODE = "i=2264"
SERVER_STATE_NODE = "i=2259"

HEADER = "=== Server Information ==="
FOOTER = "=" * len(HEADER)


@dataclass
class ServerInfo:
    """Snapshot of server identity. None means the read failed; "" was read as empty."""

    product_name: Optional[str] = None
    manufacturer_name: Optional[str] = None
    software_version: Optional[str] = None
    server_state: Optional[str] = None


def _format_state(value: Any) -> str:
    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return ua.ServerState(value).name
        except ValueError:
            pass
    return str(value)


# (field, node, formatter, label)
PROBED_FIELDS = (
    ("product_name", PRODUCT_NAME_NODE, str, "Product"),
    ("manufacturer_name", MANUFACTURER_NAME_NODE, str, "Manufacturer"),
    ("software_version", SOFTWARE_VERSION_NODE, str, "Version"),
    ("server_state", SERVER_STATE_NODE, _format_state, "State"),
)


async def probe_server_info(session) -> ServerInfo:
    """
    Read product name, manufacturer, software version and state from a session

    Every read is attempted independently; a failed read leaves its field
    as None. This never raises for read failures, and a disconnected
    session simply yields an empty ServerInfo.

    Args:
        session: Object with an async ``read_node(NodeAddress)`` method

    Returns:
        ServerInfo with the fields that could be read
    """
    info = ServerInfo()
    for field_name, node, formatter, _ in PROBED_FIELDS:
        try:
            value = await session.read_node(parse_node_address(node))
        except ReadError as e:
            logger.debug(f"Could not read {field_name} ({node}): {e}")
            continue
        setattr(info, field_name, formatter(value))
    return info


def render_server_info(info: ServerInfo) -> str:
    lines = ["", HEADER]
    for field_name, _, _, label in PROBED_FIELDS:
        value = getattr(info, field_name)
        if value is not None:
            lines.append(f"{label + ':':<14}{value}")
    lines.append(FOOTER)
    return "\n".join(lines)
