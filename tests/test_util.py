import io

import pytest

from ubustub.devicepath import MEDIA_FILEPATH_DP, MSG_URI_DP, DevicePathNode, DevicePathType
from ubustub.util import (
    FILE_READ_MAX,
    READ_CHUNK_SIZE,
    chunked_read,
    convert_efi_path,
    file_handle_read,
    get_extra_dir,
    insertion_sort,
    is_ascii,
    mangle_stub_cmdline,
    remove_boot_count,
    str_to_efi_path,
    url_replace_last_component,
)


def _file_node(name: str) -> DevicePathNode:
    return DevicePathNode(DevicePathType.MEDIA, MEDIA_FILEPATH_DP, (name + "\0").encode("utf-16-le"))


class _CountingReader(io.BytesIO):
    def __init__(self, data):
        super().__init__(data)
        self.requests = []

    def read(self, n=-1):
        self.requests.append(n)
        return super().read(n)


class _FailingReader:
    def read(self, n=-1):
        raise OSError("device error")


def test_convert_efi_path_separators():
    assert convert_efi_path("/EFI/Linux/a.efi") == "\\EFI\\Linux\\a.efi"


def test_convert_efi_path_collapses_backslashes():
    result = convert_efi_path("//a///b\\\\c/")
    assert "/" not in result
    assert "\\\\" not in result
    assert result.replace("\\", "") == "abc"


def test_convert_efi_path_is_idempotent():
    once = convert_efi_path("/x//y/z")
    assert convert_efi_path(once) == once


def test_str_to_efi_path_accepts_bytes():
    assert str_to_efi_path(b"/a/b") == str_to_efi_path("/a/b") == convert_efi_path("/a/b")


def test_mangle_stub_cmdline_none():
    assert mangle_stub_cmdline(None) is None


def test_mangle_stub_cmdline_trims_and_replaces():
    assert mangle_stub_cmdline(" \t quiet\nsplash\x7f \r\n") == "quiet splash"


def test_mangle_stub_cmdline_all_whitespace():
    assert mangle_stub_cmdline(" \n\t ") == ""


def test_mangle_stub_cmdline_keeps_inner_runs():
    result = mangle_stub_cmdline("a\t\tb")
    assert result.split(" ") == ["a", "", "b"]


def test_chunked_read_reads_in_chunks():
    data = bytes(range(256)) * (READ_CHUNK_SIZE // 256 * 2 + 3)
    reader = _CountingReader(data)
    assert chunked_read(reader, len(data)) == data
    assert max(reader.requests) <= READ_CHUNK_SIZE
    assert len(reader.requests) >= 3


def test_chunked_read_zero_size():
    reader = _CountingReader(b"abc")
    assert chunked_read(reader, 0) == b""
    assert reader.requests == []


def test_chunked_read_short_file():
    assert chunked_read(io.BytesIO(b"hello"), 100) == b"hello"


def test_chunked_read_propagates_errors():
    with pytest.raises(OSError):
        chunked_read(_FailingReader(), 10)


def test_file_handle_read_whole_file():
    data = b"0123456789"
    assert file_handle_read(io.BytesIO(data)) == data


def test_file_handle_read_offset_and_size():
    data = b"0123456789"
    assert file_handle_read(io.BytesIO(data), 3, 4) == data[3:7]


def test_file_handle_read_from_real_file(tmp_path):
    target = tmp_path / "seed"
    target.write_bytes(b"x" * 50)
    with target.open("rb") as f:
        assert file_handle_read(f, 10, 0) == b"x" * 40


def test_file_handle_read_too_large():
    with pytest.raises(ValueError):
        file_handle_read(io.BytesIO(b"a"), 0, FILE_READ_MAX + 1)


def test_insertion_sort_matches_sorted():
    items = [5, 3, 9, 1, 3, 7]
    expected = sorted(items)
    insertion_sort(items, lambda a, b: (a > b) - (a < b))
    assert items == expected


def test_insertion_sort_is_stable():
    items = [(2, "a"), (1, "b"), (2, "c"), (1, "d")]
    insertion_sort(items, lambda a, b: a[0] - b[0])
    assert [tag for _, tag in items] == ["b", "d", "a", "c"]


def test_is_ascii():
    assert is_ascii("plain text")
    assert not is_ascii("caf\u00e9")
    assert not is_ascii(None)
    assert is_ascii("")


def test_remove_boot_count_left_and_done():
    assert remove_boot_count("\\EFI\\Linux\\k+3-1.efi") == "\\EFI\\Linux\\k.efi"


def test_remove_boot_count_at_end():
    assert remove_boot_count("entry+5") == "entry"


@pytest.mark.parametrize("path", ["k.efi", "k+x.efi", "k+3a.efi", "k+3-.efi", "k+-1.efi"])
def test_remove_boot_count_leaves_invalid(path):
    assert remove_boot_count(path) == path


def test_get_extra_dir():
    nodes = [_file_node("\\EFI\\Linux\\k+3-1.efi")]
    assert get_extra_dir(nodes) == "\\EFI\\Linux\\k.efi.extra.d"


def test_get_extra_dir_joins_multiple_nodes():
    nodes = [_file_node("\\EFI"), _file_node("Linux\\k.efi")]
    result = get_extra_dir(nodes)
    assert result.endswith(".extra.d")
    assert "/" not in result
    assert result == get_extra_dir([_file_node("\\EFI\\Linux\\k.efi")])


def test_get_extra_dir_rejects_other_nodes():
    nodes = [_file_node("\\a.efi"), DevicePathNode(DevicePathType.MESSAGING, MSG_URI_DP, b"http://x/")]
    assert get_extra_dir(nodes) is None
    assert get_extra_dir(None) is None


def test_url_replace_last_component():
    result = url_replace_last_component("http://example.com/boot/image.efi?x=1#frag", "other.efi")
    assert result == "http://example.com/boot//other.efi"


def test_url_replace_last_component_trailing_slashes():
    a = url_replace_last_component("http://example.com/dir/file/", "n")
    b = url_replace_last_component("http://example.com/dir/file", "n")
    assert a == b
    assert a.endswith("/n")
    assert "file" not in a


@pytest.mark.parametrize(
    "url",
    ["nocolon", ":x/y", "http://", "http:///", "http://example.com", "http://example.com/", "http://example.com?q"],
)
def test_url_replace_last_component_invalid(url):
    assert url_replace_last_component(url, "f") is None