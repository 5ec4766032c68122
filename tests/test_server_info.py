"""
Unit tests for the server information probe
"""
import pytest
import os
import sys
from unittest.mock import AsyncMock, Mock

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from errors import ReadError, ReadErrorKind
from opc_session import ProtocolSession
from server_info import (
    FOOTER,
    HEADER,
    ServerInfo,
    probe_server_info,
    render_server_info,
)


def fake_session(values):
    """Session whose reads return values[node] or raise the ReadError stored there"""

    async def read_node(address):
        value = values[str(address)]
        if isinstance(value, ReadError):
            raise value
        return value

    session = Mock()
    session.read_node = AsyncMock(side_effect=read_node)
    return session


ALL_VALUES = {
    "i=2261": "Demo Server",
    "i=2263": "ACME",
    "i=2264": "2.1.0",
    "i=2259": 0,
}


class TestProbe:
    """Probing reads four nodes and tolerates failures"""

    @pytest.mark.asyncio
    async def test_all_fields(self):
        info = await probe_server_info(fake_session(ALL_VALUES))

        assert info == ServerInfo(
            product_name="Demo Server",
            manufacturer_name="ACME",
            software_version="2.1.0",
            server_state="Running",
        )

    @pytest.mark.asyncio
    async def test_two_failed_reads(self):
        values = dict(ALL_VALUES)
        values["i=2263"] = ReadError(ReadErrorKind.BAD_STATUS, "i=2263", status=0x80340000)
        values["i=2259"] = ReadError(ReadErrorKind.EMPTY_RESULT, "i=2259")

        info = await probe_server_info(fake_session(values))

        assert info.product_name == "Demo Server"
        assert info.software_version == "2.1.0"
        assert info.manufacturer_name is None
        assert info.server_state is None

    @pytest.mark.asyncio
    async def test_disconnected_session_gives_empty_info(self):
        session = ProtocolSession(client_factory=Mock())
        assert await probe_server_info(session) == ServerInfo()

    @pytest.mark.asyncio
    async def test_empty_string_is_present(self):
        values = dict(ALL_VALUES, **{"i=2263": ""})
        info = await probe_server_info(fake_session(values))
        assert info.manufacturer_name == ""

    @pytest.mark.asyncio
    async def test_unknown_state_value_is_stringified(self):
        values = dict(ALL_VALUES, **{"i=2259": 42})
        info = await probe_server_info(fake_session(values))
        assert info.server_state == "42"


class TestRender:
    """Rendering lists only present fields"""

    def test_all_fields(self):
        text = render_server_info(ServerInfo("Demo", "ACME", "1.0", "Running"))
        assert text.splitlines() == [
            "",
            "=== Server Information ===",
            "Product:      Demo",
            "Manufacturer: ACME",
            "Version:      1.0",
            "State:        Running",
            "==========================",
        ]

    def test_absent_fields_are_skipped(self):
        text = render_server_info(ServerInfo(product_name="Demo"))
        lines = text.splitlines()
        assert lines[1:] == [HEADER, "Product:      Demo", FOOTER]

    def test_empty_info(self):
        assert render_server_info(ServerInfo()).splitlines()[1:] == [HEADER, FOOTER]

    def test_empty_string_shown(self):
        text = render_server_info(ServerInfo(manufacturer_name=""))
        assert "Manufacturer: " in text.splitlines()
