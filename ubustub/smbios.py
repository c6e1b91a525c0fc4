"""Reading SMBIOS structure tables: BIOS, system, baseboard and OEM string data."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Optional, Union

__all__ = [
    "SMBIOS_TABLE_GUID",
    "SMBIOS3_TABLE_GUID",
    "RawSmbiosInfo",
    "SmbiosTables",
    "parse_entry_point",
]

SMBIOS_TABLE_GUID = "eb9d2d31-2d88-11d3-9a16-0090273fc14d"
SMBIOS3_TABLE_GUID = "f2fd1544-9794-4a2c-992e-e5bbcf20e394"

# Packed layouts of the two entry point structures.
_ENTRY3 = struct.Struct("<5sBBBBBBBIQ")
_ENTRY = struct.Struct("<4sBBBBHB5s5sBHIHB")

_HEADER_SIZE = 4
_END_OF_TABLE = 127

# Minimum formatted-area sizes of the tables that are read.
_TYPE0_SIZE = 20
_TYPE1_SIZE = 27
_TYPE2_SIZE = 8
_TYPE11_SIZE = 5

_TYPE0_CHARACTERISTICS_EXT2 = 19
_VIRTUAL_MACHINE_BIT = 1 << 4


def parse_entry_point(
    smbios3_entry: Optional[bytes], smbios_entry: Optional[bytes]
) -> Optional[tuple[int, int]]:
    """Return ``(table_address, table_size)`` from the SMBIOS entry points.

    The 64-bit SMBIOS 3 entry point is preferred; the 32-bit one is the
    fallback. Returns None when neither is present and valid.
    """
    if smbios3_entry is not None and len(smbios3_entry) >= _ENTRY3.size:
        fields = _ENTRY3.unpack_from(smbios3_entry)
        anchor, length = fields[0], fields[2]
        if anchor == b"_SM3_" and length <= _ENTRY3.size:
            return fields[9], fields[8]

    if smbios_entry is not None and len(smbios_entry) >= _ENTRY.size:
        fields = _ENTRY.unpack_from(smbios_entry)
        anchor, length = fields[0], fields[2]
        if anchor == b"_SM_" and length <= _ENTRY.size:
            return fields[11], fields[10]

    return None


def _decode(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


class _OemString(str):
    """An OEM string suffix that remembers where it sits in the table data."""

    offset: int

    def __new__(cls, value: str, offset: int) -> "_OemString":
        obj = super().__new__(cls, value)
        obj.offset = offset
        return obj


@dataclass(frozen=True)
class RawSmbiosInfo:
    """Identification strings from the system (type 1) and baseboard (type 2) tables."""

    manufacturer: Optional[str] = None
    product_name: Optional[str] = None
    product_sku: Optional[str] = None
    family: Optional[str] = None
    baseboard_manufacturer: Optional[str] = None
    baseboard_product: Optional[str] = None


class SmbiosTables:
    """A block of SMBIOS structures, as pointed to by an entry point."""

    def __init__(self, data) -> None:
        self._data = bytes(data)
        self._raw_info: Optional[RawSmbiosInfo] = None

    def _locate(self, table_type: int, min_size: int) -> Optional[int]:
        data = self._data
        p = 0
        size = len(data)
        while True:
            if size < _HEADER_SIZE:
                return None
            current_type, length = data[p], data[p + 1]
            if current_type == _END_OF_TABLE:
                return None
            if size < length:
                return None
            if current_type == table_type:
                if length < min_size:
                    return None
                return p

            size -= length
            p += length

            # No strings appended: two NUL bytes.
            if size >= 2 and data[p] == 0 and data[p + 1] == 0:
                size -= 2
                p += 2
                continue

            first = True
            while True:
                e = data.find(b"\0", p, p + size)
                if e < 0:
                    return None
                if not first and e == p:
                    p += 1
                    size -= 1
                    break
                size -= e + 1 - p
                p = e + 1
                first = False

    def find_table(self, table_type: int, min_size: int = _HEADER_SIZE) -> Optional[bytes]:
        """Return the first table of ``table_type`` and everything after it.

        Returns None when there is no such table before the end marker, when
        the data is malformed, or when the table is shorter than ``min_size``.
        """
        offset = self._locate(table_type, min_size)
        if offset is None:
            return None
        return self._data[offset:]

    def in_hypervisor(self) -> bool:
        """Return True if the BIOS information marks this as a virtual machine."""
        table = self.find_table(0, _TYPE0_SIZE)
        if table is None:
            return False
        return bool(table[_TYPE0_CHARACTERISTICS_EXT2] & _VIRTUAL_MACHINE_BIT)

    def find_oem_string(
        self, name: str, after: Union[None, int, str] = None
    ) -> Optional[str]:
        """Return the rest of the first OEM string starting with ``name``.

        ``after`` may be a value returned earlier (or its offset) to continue
        the search past it. The returned string carries its ``offset``.
        """
        base = self._locate(11, _TYPE11_SIZE)
        if base is None:
            return None
        if after is None:
            after_offset = None
        elif isinstance(after, int):
            after_offset = after
        else:
            after_offset = getattr(after, "offset", None)
            if after_offset is None:
                raise TypeError("after must be a value returned by find_oem_string or an offset")

        data = self._data
        prefix = name.encode("utf-8")
        length = data[base + 1]
        left = len(data) - base - length
        p = base + _TYPE11_SIZE
        limit = p + left
        while p < limit:
            e = data.find(b"\0", p, limit)
            if e < 0 or e == p:
                break
            entry = data[p:e]
            if entry.startswith(prefix):
                suffix_offset = p + len(prefix)
                if after_offset is None or suffix_offset > after_offset:
                    return _OemString(_decode(data[suffix_offset:e]), suffix_offset)
            p = e + 1
        return None

    @staticmethod
    def _get_string(table: bytes, nr: int) -> Optional[str]:
        p = table[1]
        limit = len(table)
        index = 1
        while index <= nr and p < limit:
            e = table.find(b"\0", p, limit)
            if e < 0 or e == p:
                break
            if index == nr:
                return _decode(table[p:e])
            p = e + 1
            index += 1
        return None

    def _populate(self) -> RawSmbiosInfo:
        fields: dict[str, Optional[str]] = {}
        type1 = self.find_table(1, _TYPE1_SIZE)
        if type1 is not None:
            fields["manufacturer"] = self._get_string(type1, type1[4])
            fields["product_name"] = self._get_string(type1, type1[5])
            fields["product_sku"] = self._get_string(type1, type1[25])
            fields["family"] = self._get_string(type1, type1[26])
        type2 = self.find_table(2, _TYPE2_SIZE)
        if type2 is not None:
            fields["baseboard_manufacturer"] = self._get_string(type2, type2[4])
            fields["baseboard_product"] = self._get_string(type2, type2[5])
        return RawSmbiosInfo(**fields)

    def raw_info(self) -> RawSmbiosInfo:
        """Return system and baseboard strings; computed once, then cached."""
        if self._raw_info is None:
            self._raw_info = self._populate()
        return self._raw_info