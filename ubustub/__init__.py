"""Building blocks of a unified kernel image boot stub."""

__version__ = "0.1.0"

__all__ = [
    "devicepath",
    "sha256",
    "smbios",
    "strings",
    "stub",
    "uki",
    "util",
]