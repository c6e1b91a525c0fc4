"""Section names of a unified kernel image."""

from __future__ import annotations

import enum
from typing import Optional

__all__ = ["UnifiedSection", "lookup_section", "section_names"]


class UnifiedSection(enum.IntEnum):
    """PE sections a unified kernel image may carry, in table order."""

    LINUX = 0
    OSREL = 1
    CMDLINE = 2
    INITRD = 3
    UCODE = 4
    SPLASH = 5
    DTB = 6
    UNAME = 7
    SBAT = 8
    PCRSIG = 9
    PCRPKEY = 10
    PROFILE = 11
    DTBAUTO = 12
    HWIDS = 13
    EFIFW = 14

    def section_name(self) -> str:
        """Return the PE section name, e.g. ``.linux``."""
        return "." + self.name.lower()


def lookup_section(name: str) -> Optional[UnifiedSection]:
    """Return the section called ``name``, or None if it is not a known one."""
    for section in UnifiedSection:
        if section.section_name() == name:
            return section
    return None


def section_names() -> tuple[str, ...]:
    """Return all section names in table order."""
    return tuple(section.section_name() for section in UnifiedSection)