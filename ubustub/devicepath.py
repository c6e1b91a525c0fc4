"""Binary EFI device paths: parsing, encoding and reading URI and file nodes."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass
from typing import Iterable, Optional

__all__ = [
    "DevicePathType",
    "DevicePathNode",
    "parse_device_path",
    "encode_device_path",
    "find_url",
    "file_path_text",
    "END_INSTANCE_DEVICE_PATH_SUBTYPE",
    "END_ENTIRE_DEVICE_PATH_SUBTYPE",
    "MEDIA_HARDDRIVE_DP",
    "MEDIA_VENDOR_DP",
    "MEDIA_FILEPATH_DP",
    "MEDIA_PIWG_FW_FILE_DP",
    "MEDIA_PIWG_FW_VOL_DP",
    "MSG_URI_DP",
]

END_INSTANCE_DEVICE_PATH_SUBTYPE = 0x01
END_ENTIRE_DEVICE_PATH_SUBTYPE = 0xFF

MEDIA_HARDDRIVE_DP = 0x01
MEDIA_VENDOR_DP = 0x03
MEDIA_FILEPATH_DP = 0x04
MEDIA_PIWG_FW_FILE_DP = 0x06
MEDIA_PIWG_FW_VOL_DP = 0x07

MSG_URI_DP = 24

_HEADER = struct.Struct("<BBH")


class DevicePathType(enum.IntEnum):
    """Device path node types."""

    HARDWARE = 0x01
    ACPI = 0x02
    MESSAGING = 0x03
    MEDIA = 0x04
    BBS = 0x05
    END = 0x7F


@dataclass(frozen=True)
class DevicePathNode:
    """One device path node: type, sub-type and the payload after the header."""

    type: int
    subtype: int
    data: bytes = b""

    def encode(self) -> bytes:
        """Return the node as wire bytes, header included."""
        length = _HEADER.size + len(self.data)
        if length > 0xFFFF:
            raise ValueError("device path node too long")
        return _HEADER.pack(self.type, self.subtype, length) + bytes(self.data)

    def _is_end(self) -> bool:
        return self.type == DevicePathType.END and self.subtype == END_ENTIRE_DEVICE_PATH_SUBTYPE


_END_NODE = DevicePathNode(DevicePathType.END, END_ENTIRE_DEVICE_PATH_SUBTYPE)


def parse_device_path(data: bytes) -> list[DevicePathNode]:
    """Split a device path into its nodes, stopping at the end-of-path node."""
    view = memoryview(bytes(data))
    nodes: list[DevicePathNode] = []
    offset = 0
    while True:
        if len(view) - offset < _HEADER.size:
            raise ValueError("device path truncated before end node")
        node_type, subtype, length = _HEADER.unpack_from(view, offset)
        if length < _HEADER.size:
            raise ValueError(f"device path node length {length} too short")
        if offset + length > len(view):
            raise ValueError("device path node extends past end of data")
        node = DevicePathNode(node_type, subtype, view[offset + _HEADER.size:offset + length].tobytes())
        if node._is_end():
            return nodes
        nodes.append(node)
        offset += length


def encode_device_path(nodes: Iterable[DevicePathNode]) -> bytes:
    """Encode nodes followed by an end-of-path node."""
    return b"".join(node.encode() for node in nodes) + _END_NODE.encode()


def _decode_uri(data: bytes) -> str:
    return data.split(b"\0", 1)[0].decode("utf-8", errors="replace")


def _decode_path_name(data: bytes) -> str:
    usable = data[: len(data) - len(data) % 2]
    return usable.decode("utf-16-le", errors="replace").split("\0", 1)[0]


def find_url(nodes: Iterable[DevicePathNode]) -> Optional[str]:
    """Return the URI of the first messaging URI node, or None."""
    for node in nodes:
        if node.type == DevicePathType.MESSAGING and node.subtype == MSG_URI_DP:
            return _decode_uri(node.data)
    return None


def file_path_text(nodes: Iterable[DevicePathNode]) -> Optional[str]:
    """Join the path names of file path nodes with '/'.

    Returns None if any node is not a media file path node.
    """
    names = []
    for node in nodes:
        if node.type != DevicePathType.MEDIA or node.subtype != MEDIA_FILEPATH_DP:
            return None
        names.append(_decode_path_name(node.data))
    return "/".join(names)