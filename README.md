# ubustub

Pure-Python building blocks of a unified kernel image (UKI) boot stub. The
decisions a stub makes at boot time are modelled as plain functions and
classes that can be called and tested on any machine. There are no
dependencies outside the standard library.

## Modules

- `ubustub.sha256`: a self-contained SHA-256 (`Sha256` with `update()`,
  `copy()`, `digest()`, `hexdigest()`, and the one-shot `sha256()`).
- `ubustub.strings`: `startswith()`, `startswith_no_case()`, `endswith()`,
  `endswith_no_case()` (each returns the remaining or matching text, or
  `None`), and `strverscmp_improved()`, a version comparison that returns
  -1, 0 or 1 and understands `~`, `-`, `^` and `.` segment prefixes.
- `ubustub.uki`: the `UnifiedSection` enumeration of UKI PE sections
  (`.linux`, `.osrel`, `.cmdline`, `.initrd`, …, `.efifw`), with
  `UnifiedSection.section_name()`, `lookup_section()` and `section_names()`.
- `ubustub.devicepath`: `DevicePathType`, `DevicePathNode`,
  `parse_device_path()` and `encode_device_path()` for binary UEFI device
  paths, `find_url()` for the first URI node and `file_path_text()` to join
  file path nodes with `/`.
- `ubustub.util`: EFI path normalisation (`convert_efi_path()`,
  `str_to_efi_path()`), command line cleanup (`mangle_stub_cmdline()`),
  chunked file reads (`chunked_read()`, `file_handle_read()`),
  `insertion_sort()`, `is_ascii()`, boot counter removal
  (`remove_boot_count()`), `.extra.d` directory names (`get_extra_dir()`)
  and `url_replace_last_component()`.
- `ubustub.smbios`: `parse_entry_point()` to find the structure table from
  the SMBIOS 3 or SMBIOS 2 entry point, and `SmbiosTables` to look up tables
  (`find_table()`), detect a virtual machine (`in_hypervisor()`), search OEM
  strings (`find_oem_string()`) and read system and baseboard identity
  (`raw_info()`, returning a `RawSmbiosInfo`).
- `ubustub.stub`: the `LoaderFeature` and `StubFeature` flags,
  `combine_measured_flag()`, `parse_cmdline()` (detects `debug`),
  `process_arguments()`, `pcr_variables()`, `select_devicetree_section()`
  and `stub_variables()`.

## Installing

```
pip install .
```

Running the tests needs the `test` extra:

```
pip install .[test]
pytest
```

## Examples

```python
from ubustub.sha256 import sha256
from ubustub.strings import strverscmp_improved
from ubustub.uki import UnifiedSection, lookup_section

print(sha256(b"abc").hex())
# ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad

assert strverscmp_improved("123~rc1-1", "123") < 0
assert strverscmp_improved("124-1", "123a-1") > 0

assert lookup_section(".linux") is UnifiedSection.LINUX
print(UnifiedSection.INITRD.section_name())   # .initrd
```

Paths, command lines and URLs:

```python
from ubustub.util import (
    convert_efi_path,
    mangle_stub_cmdline,
    remove_boot_count,
    url_replace_last_component,
)

print(convert_efi_path("/EFI//Linux/uki.efi"))        # \EFI\Linux\uki.efi
print(remove_boot_count("\\EFI\\Linux\\uki+3-1.efi"))  # \EFI\Linux\uki.efi
print(mangle_stub_cmdline("  quiet\tsplash \n"))      # quiet splash

print(url_replace_last_component("http://example.com/boot/uki.efi", "initrd.img"))
# http://example.com/boot//initrd.img
```

Device paths:

```python
from ubustub.devicepath import (
    MSG_URI_DP,
    DevicePathNode,
    DevicePathType,
    encode_device_path,
    find_url,
    parse_device_path,
)

node = DevicePathNode(DevicePathType.MESSAGING, MSG_URI_DP, b"http://example.com/uki.efi")
raw = encode_device_path([node])
print(find_url(parse_device_path(raw)))   # http://example.com/uki.efi
```

Reading identity strings from an SMBIOS structure table (`table_bytes` is
the table data the entry point refers to):

```python
from ubustub.smbios import SmbiosTables

tables = SmbiosTables(table_bytes)
info = tables.raw_info()
print(info.manufacturer, info.product_name)
print(tables.in_hypervisor())
```

Stub decisions:

```python
from ubustub.stub import parse_cmdline, process_arguments, stub_variables

cmdline = process_arguments(None, ["stub.efi", "root=/dev/sda1", "debug"])
print(cmdline)                  # root=/dev/sda1 debug
print(parse_cmdline(cmdline))   # True
print(stub_variables(url="http://example.com/uki.efi")["StubDeviceURL"])
```

## What the package does not do

It computes what a stub would decide and export, but it does not run as a
boot stub: it does not read or write firmware variables, measure into a TPM,
load or start a kernel, or install a devicetree. It has no SHA-1, does not
derive or refresh a boot random seed, and does not read or change Secure Boot
state or firmware authentication hooks. There is no command-line program.