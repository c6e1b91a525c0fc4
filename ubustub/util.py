"""Path, command line, file reading and URL helpers used by the stub."""

from __future__ import annotations

import functools
import io
import os
from typing import BinaryIO, Callable, Iterable, MutableSequence, Optional, TypeVar

from .devicepath import DevicePathNode, file_path_text

__all__ = [
    "FILE_READ_MAX",
    "READ_CHUNK_SIZE",
    "convert_efi_path",
    "str_to_efi_path",
    "mangle_stub_cmdline",
    "chunked_read",
    "file_handle_read",
    "insertion_sort",
    "is_ascii",
    "remove_boot_count",
    "get_extra_dir",
    "url_replace_last_component",
]

# Never read more than 16G into memory.
FILE_READ_MAX = 16 * 1024 * 1024 * 1024

# Some firmware cannot handle large reads, so files are read in pieces of this size.
READ_CHUNK_SIZE = 1024 * 1024

T = TypeVar("T")


def _cstr(s: str) -> str:
    return s.split("\0", 1)[0]


def convert_efi_path(path: str) -> str:
    """Turn '/' into '\\' and collapse runs of '\\', as EFI file paths require."""
    out: list[str] = []
    for c in _cstr(path):
        if c == "/":
            c = "\\"
        if c == "\\" and out and out[-1] == "\\":
            continue
        out.append(c)
    return "".join(out)


def str_to_efi_path(path) -> str:
    """Convert a UTF-8 (or already decoded) path into an EFI file path."""
    if isinstance(path, (bytes, bytearray, memoryview)):
        path = bytes(path).decode("utf-8")
    return convert_efi_path(path)


def _shall_be_whitespace(c: str) -> bool:
    code = ord(c)
    return code <= 0x20 or code == 0x7F


def mangle_stub_cmdline(cmdline: Optional[str]) -> Optional[str]:
    """Drop leading and trailing whitespace and turn inner control characters into spaces."""
    if cmdline is None:
        return None
    text = _cstr(cmdline)
    start = 0
    while start < len(text) and _shall_be_whitespace(text[start]):
        start += 1
    mangled = "".join(" " if _shall_be_whitespace(c) else c for c in text[start:])
    end = len(mangled)
    while end > 0 and mangled[end - 1] == " ":
        end -= 1
    return mangled[:end]


def chunked_read(file: BinaryIO, size: int) -> bytes:
    """Read up to ``size`` bytes from ``file`` in chunks of at most 1 MiB.

    Stops early when the file has no more data.
    """
    if size < 0:
        raise ValueError("size must not be negative")
    parts: list[bytes] = []
    remaining = size
    while remaining > 0:
        want = min(READ_CHUNK_SIZE, remaining)
        chunk = file.read(want)
        if not chunk:
            break
        if len(chunk) > want:
            raise OSError("read returned more data than requested")
        parts.append(bytes(chunk))
        remaining -= len(chunk)
    return b"".join(parts)


def _file_size(file: BinaryIO) -> int:
    try:
        return os.fstat(file.fileno()).st_size
    except (AttributeError, OSError, io.UnsupportedOperation):
        position = file.tell()
        end = file.seek(0, os.SEEK_END)
        file.seek(position)
        return end


def file_handle_read(file: BinaryIO, offset: int = 0, size: int = 0) -> bytes:
    """Read ``size`` bytes at ``offset``; a size of 0 means the whole file size.

    Raises ValueError when the requested size exceeds :data:`FILE_READ_MAX`.
    """
    if size == 0:
        size = _file_size(file)
    if size > FILE_READ_MAX:
        raise ValueError(f"refusing to read {size} bytes into memory")
    if offset > 0:
        file.seek(offset)
    return chunked_read(file, size)


def insertion_sort(items: MutableSequence[T], compare: Callable[[T, T], int]) -> None:
    """Sort ``items`` in place, stably, by a three-way ``compare`` function."""
    items[:] = sorted(items, key=functools.cmp_to_key(compare))


def is_ascii(s: Optional[str]) -> bool:
    """Return True if ``s`` holds only 7-bit characters; None is not ASCII."""
    if s is None:
        return False
    return all(ord(c) <= 127 for c in _cstr(s))


def _skip_number(s: str, pos: int) -> Optional[int]:
    end = pos
    while end < len(s) and "0" <= s[end] <= "9":
        end += 1
    return end if end > pos else None


def remove_boot_count(path: str) -> str:
    """Strip a '+LEFT[-DONE]' boot counter before the extension or the end of ``path``."""
    plus = path.find("+")
    if plus < 0:
        return path
    tail = _skip_number(path, plus + 1)
    if tail is None:
        return path
    if tail < len(path) and path[tail] == "-":
        tail = _skip_number(path, tail + 1)
        if tail is None:
            return path
    if tail < len(path) and path[tail] != ".":
        return path
    return path[:plus] + path[tail:]


def get_extra_dir(path: Optional[Iterable[DevicePathNode]]) -> Optional[str]:
    """Return the '.extra.d' directory belonging to an image's file path nodes.

    Returns None if there is no path or it holds anything but file path nodes.
    """
    if path is None:
        return None
    text = file_path_text(path)
    if text is None:
        return None
    return remove_boot_count(convert_efi_path(text)) + ".extra.d"


def _span(s: str, start: int, chars: str, matching: bool) -> int:
    end = start
    while end < len(s) and (s[end] in chars) == matching:
        end += 1
    return end - start


def url_replace_last_component(url: str, filename: str) -> Optional[str]:
    """Replace the last path component of ``url`` with ``filename``.

    Query and fragment are dropped. Returns None if the URL has no scheme,
    no host or no path component to replace.
    """
    colon = url.find(":")
    if colon <= 0:
        return None
    d = colon + 1
    d += _span(url, d, "/", True)

    host_len = _span(url, d, "/?#", False)
    if host_len == 0:
        return None
    d += host_len

    e = d + _span(url, d, "?#", False)
    while e > d and url[e - 1] == "/":
        e -= 1

    p = e
    while p > d and url[p - 1] != "/":
        p -= 1

    if e <= p:
        return None

    return f"{url[:p]}/{filename}"