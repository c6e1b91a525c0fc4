"""Decisions the stub makes before handing over to the kernel.

Covers feature flags, command line handling, measurement bookkeeping and
the variables the stub exports for the operating system.
"""

from __future__ import annotations

import enum
from collections.abc import Container, Sequence
from typing import Optional, Union

from .uki import UnifiedSection
from .util import mangle_stub_cmdline

__all__ = [
    "STUB_NAME",
    "STUB_VERSION",
    "TPM2_PCR_KERNEL_BOOT",
    "TPM2_PCR_KERNEL_CONFIG",
    "TPM2_PCR_SYSEXTS",
    "LoaderFeature",
    "StubFeature",
    "STUB_FEATURES",
    "combine_measured_flag",
    "parse_cmdline",
    "process_arguments",
    "pcr_variables",
    "select_devicetree_section",
    "stub_variables",
]

STUB_NAME = "ubustub"
STUB_VERSION = "0.1.0"

TPM2_PCR_KERNEL_BOOT = 11
TPM2_PCR_KERNEL_CONFIG = 12
TPM2_PCR_SYSEXTS = 13


class LoaderFeature(enum.IntFlag):
    """Features a boot loader reports in ``LoaderFeatures``."""

    CONFIG_TIMEOUT = 1 << 0
    CONFIG_TIMEOUT_ONE_SHOT = 1 << 1
    ENTRY_DEFAULT = 1 << 2
    ENTRY_ONESHOT = 1 << 3
    BOOT_COUNTING = 1 << 4
    XBOOTLDR = 1 << 5
    RANDOM_SEED = 1 << 6
    LOAD_DRIVER = 1 << 7
    SORT_KEY = 1 << 8
    SAVED_ENTRY = 1 << 9
    DEVICETREE = 1 << 10
    SECUREBOOT_ENROLL = 1 << 11
    RETAIN_SHIM = 1 << 12
    MENU_DISABLE = 1 << 13
    MULTI_PROFILE_UKI = 1 << 14
    REPORT_URL = 1 << 15
    TYPE1_UKI = 1 << 16
    TYPE1_UKI_URL = 1 << 17


class StubFeature(enum.IntFlag):
    """Features a stub reports in ``StubFeatures``."""

    REPORT_BOOT_PARTITION = 1 << 0
    PICK_UP_CREDENTIALS = 1 << 1
    PICK_UP_SYSEXTS = 1 << 2
    THREE_PCRS = 1 << 3
    RANDOM_SEED = 1 << 4
    CMDLINE_ADDONS = 1 << 5
    CMDLINE_SMBIOS = 1 << 6
    DEVICETREE_ADDONS = 1 << 7
    PICK_UP_CONFEXTS = 1 << 8
    MULTI_PROFILE_UKI = 1 << 9
    REPORT_STUB_PARTITION = 1 << 10
    REPORT_URL = 1 << 11


STUB_FEATURES = (
    StubFeature.REPORT_BOOT_PARTITION
    | StubFeature.THREE_PCRS
    | StubFeature.RANDOM_SEED
    | StubFeature.REPORT_STUB_PARTITION
    | StubFeature.REPORT_URL
)


def combine_measured_flag(value: int, measured: int) -> int:
    """Fold one measurement result into the running ``measured`` flag.

    ``> 0`` means measured, ``0`` means there was something to measure but it
    was not, ``< 0`` means nothing was submitted yet. The first result is
    taken as is; later ones can only clear the flag.
    """
    if measured < 0:
        return value
    if value < 0:
        return int(bool(measured))
    return int(bool(value) and bool(measured))


def parse_cmdline(cmdline: Optional[str]) -> bool:
    """Return True if the space-separated command line holds the word ``debug``."""
    if cmdline is None:
        return False
    text = cmdline.split("\0", 1)[0]
    return any(word == "debug" for word in text.split(" "))


def process_arguments(
    load_options: Optional[bytes], shell_argv: Optional[Sequence[str]] = None
) -> Optional[str]:
    """Work out the command line passed to the stub, or None to use the built-in one.

    ``shell_argv`` is the shell's argument vector when started from the EFI
    shell; its first element, the stub path, is dropped. Otherwise
    ``load_options`` holds the raw UTF-16LE load options.
    """
    if shell_argv is not None:
        if len(shell_argv) <= 1:
            return None
        return " ".join(shell_argv[1:])

    if load_options is None:
        return None
    raw = bytes(load_options)
    usable = raw[: len(raw) - len(raw) % 2]
    if len(usable) < 2:
        return None
    # Some firmware fills in garbage; require a printable first character.
    if int.from_bytes(usable[:2], "little") <= 0x1F:
        return None
    text = usable.decode("utf-16-le", errors="replace").split("\0", 1)[0]
    return mangle_stub_cmdline(text)


def pcr_variables(
    sections_measured: int,
    parameters_measured: int,
    sysext_measured: int,
    confext_measured: int,
) -> dict[str, str]:
    """Return the variables telling userspace which PCRs were measured into."""
    variables: dict[str, str] = {}
    if sections_measured > 0:
        variables["StubPcrKernelImage"] = str(TPM2_PCR_KERNEL_BOOT)
    if parameters_measured > 0:
        variables["StubPcrKernelParameters"] = str(TPM2_PCR_KERNEL_CONFIG)
    if sysext_measured > 0:
        variables["StubPcrInitRDSysExts"] = str(TPM2_PCR_SYSEXTS)
    if confext_measured > 0:
        variables["StubPcrInitRDConfExts"] = str(TPM2_PCR_KERNEL_CONFIG)
    return variables


def select_devicetree_section(
    sections: Container[UnifiedSection],
) -> Optional[UnifiedSection]:
    """Pick the devicetree section to install: ``.dtbauto`` first, then ``.dtb``."""
    if UnifiedSection.DTBAUTO in sections:
        return UnifiedSection.DTBAUTO
    if UnifiedSection.DTB in sections:
        return UnifiedSection.DTB
    return None


def stub_variables(
    part_uuid: Optional[str] = None,
    url: Optional[str] = None,
    image_identifier: Optional[str] = None,
) -> dict[str, Union[str, StubFeature]]:
    """Return the loader variables the stub exports about itself."""
    variables: dict[str, Union[str, StubFeature]] = {
        "StubInfo": f"{STUB_NAME} {STUB_VERSION}",
        "StubFeatures": STUB_FEATURES,
    }
    if part_uuid:
        variables["StubDevicePartUUID"] = part_uuid
    if url:
        variables["StubDeviceURL"] = url
    if image_identifier:
        variables["StubImageIdentifier"] = image_identifier
    return variables