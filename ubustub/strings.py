"""Prefix and suffix matching and version-string comparison."""

from __future__ import annotations

from typing import Optional

__all__ = [
    "startswith",
    "startswith_no_case",
    "endswith",
    "endswith_no_case",
    "strverscmp_improved",
]

_VERSION_SEPARATORS = "~-^."


def _ascii_lower(s: str) -> str:
    return "".join(chr(ord(c) + 32) if "A" <= c <= "Z" else c for c in s)


def _cstr(s: str) -> str:
    """Cut a string at its first NUL, the way C string functions see it."""
    return s.split("\0", 1)[0]


def _is_digit(c: str) -> bool:
    return "0" <= c <= "9"


def _is_alpha(c: str) -> bool:
    return "a" <= c <= "z" or "A" <= c <= "Z"


def _is_valid_version_char(c: str) -> bool:
    return _is_digit(c) or _is_alpha(c) or (c != "" and c in _VERSION_SEPARATORS)


def _cmp(x, y) -> int:
    return (x > y) - (x < y)


def startswith(s: str, prefix: str) -> Optional[str]:
    """Return what follows ``prefix`` in ``s``, or None if ``s`` does not start with it."""
    s, prefix = _cstr(s), _cstr(prefix)
    if not s.startswith(prefix):
        return None
    return s[len(prefix):]


def startswith_no_case(s: str, prefix: str) -> Optional[str]:
    """Like :func:`startswith`, ignoring ASCII case."""
    s, prefix = _cstr(s), _cstr(prefix)
    if not _ascii_lower(s[: len(prefix)]) == _ascii_lower(prefix) or len(s) < len(prefix):
        return None
    return s[len(prefix):]


def endswith(s: str, suffix: str) -> Optional[str]:
    """Return the tail of ``s`` that equals ``suffix``, or None if there is none."""
    s, suffix = _cstr(s), _cstr(suffix)
    if not suffix:
        return ""
    if len(s) < len(suffix) or s[-len(suffix):] != suffix:
        return None
    return s[-len(suffix):]


def endswith_no_case(s: str, suffix: str) -> Optional[str]:
    """Like :func:`endswith`, ignoring ASCII case."""
    s, suffix = _cstr(s), _cstr(suffix)
    if not suffix:
        return ""
    if len(s) < len(suffix):
        return None
    tail = s[-len(suffix):]
    if _ascii_lower(tail) != _ascii_lower(suffix):
        return None
    return tail


def strverscmp_improved(a: Optional[str], b: Optional[str]) -> int:
    """Compare two version strings; return -1, 0 or 1.

    Segments are numeric or alphabetic and may be prefixed by '~' (pre-release,
    oldest), '-' (version/release separator), '^' (patched release) or '.'
    (point release). Other characters only separate segments.
    """
    a = _cstr(a or "")
    b = _cstr(b or "")
    i = j = 0

    def at(s: str, k: int) -> str:
        return s[k] if k < len(s) else ""

    while True:
        while i < len(a) and not _is_valid_version_char(a[i]):
            i += 1
        while j < len(b) and not _is_valid_version_char(b[j]):
            j += 1

        if at(a, i) == "~" or at(b, j) == "~":
            r = _cmp(at(a, i) != "~", at(b, j) != "~")
            if r:
                return r
            i += 1
            j += 1

        ca, cb = at(a, i), at(b, j)
        if ca == "" or cb == "":
            return _cmp(ca, cb)

        for sep in "-^.":
            ca, cb = at(a, i), at(b, j)
            if ca == sep or cb == sep:
                r = _cmp(ca != sep, cb != sep)
                if r:
                    return r
                i += 1
                j += 1

        if _is_digit(at(a, i)) or _is_digit(at(b, j)):
            aa = i
            while _is_digit(at(a, aa)):
                aa += 1
            bb = j
            while _is_digit(at(b, bb)):
                bb += 1

            r = _cmp(aa != i, bb != j)
            if r:
                return r

            while at(a, i) == "0":
                i += 1
            while at(b, j) == "0":
                j += 1

            r = _cmp(aa - i, bb - j)
            if r:
                return r

            r = _cmp(a[i:aa], b[j:bb])
            if r:
                return r
        else:
            aa = i
            while _is_alpha(at(a, aa)):
                aa += 1
            bb = j
            while _is_alpha(at(b, bb)):
                bb += 1

            n = min(aa - i, bb - j)
            r = _cmp(a[i:i + n], b[j:j + n])
            if r:
                return r

            r = _cmp(aa - i, bb - j)
            if r:
                return r

        i, j = aa, bb