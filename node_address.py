"""
Parsing of textual OPC UA node identifiers
"""
import base64
import binascii
import re
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Union

from asyncua import ua

from errors import ParseError

MAX_NAMESPACE = 0xFFFF
MAX_NUMERIC_ID = 0xFFFFFFFF

_DIGITS = re.compile(r"[0-9]+")


class IdentifierKind(Enum):
    NUMERIC = "i"
    STRING = "s"
    GUID = "g"
    OPAQUE = "b"


_NODEID_TYPES = {
    IdentifierKind.NUMERIC: ua.NodeIdType.Numeric,
    IdentifierKind.STRING: ua.NodeIdType.String,
    IdentifierKind.GUID: ua.NodeIdType.Guid,
    IdentifierKind.OPAQUE: ua.NodeIdType.ByteString,
}


@dataclass(frozen=True)
class NodeAddress:
    kind: IdentifierKind
    identifier: Union[int, str, uuid.UUID, bytes]
    namespace: int = 0

    def to_nodeid(self) -> ua.NodeId:
        return ua.NodeId(self.identifier, self.namespace, _NODEID_TYPES[self.kind])

    def __str__(self) -> str:
        if self.kind is IdentifierKind.OPAQUE:
            ident = base64.b64encode(self.identifier).decode("ascii")
        else:
            ident = str(self.identifier)
        prefix = f"ns={self.namespace};" if self.namespace else ""
        return f"{prefix}{self.kind.value}={ident}"


def _parse_uint(value: str, limit: int, what: str, text: str) -> int:
    if not _DIGITS.fullmatch(value):
        raise ParseError(f"invalid {what} {value!r} in node id {text!r}")
    number = int(value)
    if number > limit:
        raise ParseError(f"{what} {number} out of range in node id {text!r}")
    return number


def parse_node_address(text: str) -> NodeAddress:
    """
    Parse a node identifier such as ``i=2261`` or ``ns=2;s=Motor.Speed``

    Args:
        text: Node identifier in OPC UA string notation

    Returns:
        Parsed NodeAddress

    Raises:
        ParseError: If the text is not a supported node identifier
    """
    if not text:
        raise ParseError("empty node id")

    namespace = 0
    rest = text
    if text.startswith("ns="):
        ns_part, sep, rest = text[3:].partition(";")
        if not sep:
            raise ParseError(f"missing identifier in node id {text!r}")
        namespace = _parse_uint(ns_part, MAX_NAMESPACE, "namespace", text)

    kind_code, sep, value = rest.partition("=")
    if not sep:
        raise ParseError(f"missing identifier in node id {text!r}")
    try:
        kind = IdentifierKind(kind_code)
    except ValueError:
        raise ParseError(f"unsupported identifier kind {kind_code!r} in node id {text!r}")
    if not value:
        raise ParseError(f"missing identifier in node id {text!r}")

    if kind is IdentifierKind.NUMERIC:
        identifier = _parse_uint(value, MAX_NUMERIC_ID, "identifier", text)
    elif kind is IdentifierKind.GUID:
        try:
            identifier = uuid.UUID(value)
        except ValueError:
            raise ParseError(f"invalid guid {value!r} in node id {text!r}")
    elif kind is IdentifierKind.OPAQUE:
        try:
            identifier = base64.b64decode(value, validate=True)
        except binascii.Error:
            raise ParseError(f"invalid base64 {value!r} in node id {text!r}")
    else:
        identifier = value

    return NodeAddress(kind=kind, identifier=identifier, namespace=namespace)
