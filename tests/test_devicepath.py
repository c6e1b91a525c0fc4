import pytest

from ubustub.devicepath import (
    MEDIA_FILEPATH_DP,
    MEDIA_HARDDRIVE_DP,
    MSG_URI_DP,
    DevicePathNode,
    DevicePathType,
    encode_device_path,
    file_path_text,
    find_url,
    parse_device_path,
)

END_BYTES = b"\x7f\xff\x04\x00"


def file_node(name):
    return DevicePathNode(DevicePathType.MEDIA, MEDIA_FILEPATH_DP, (name + "\0").encode("utf-16-le"))


def uri_node(uri):
    return DevicePathNode(DevicePathType.MESSAGING, MSG_URI_DP, uri.encode("utf-8"))


def test_empty_path_is_end_node():
    assert encode_device_path([]) == END_BYTES
    assert parse_device_path(END_BYTES) == []


def test_node_encode_header():
    node = DevicePathNode(DevicePathType.MEDIA, MEDIA_FILEPATH_DP, b"ab")
    encoded = node.encode()
    assert encoded[:4] == bytes([4, 4, 6, 0])
    assert encoded[4:] == b"ab"


def test_round_trip():
    nodes = [
        DevicePathNode(DevicePathType.MEDIA, MEDIA_HARDDRIVE_DP, bytes(38)),
        file_node("\\EFI\\Linux\\vmlinuz.efi"),
    ]
    assert parse_device_path(encode_device_path(nodes)) == nodes


def test_parse_stops_at_end_node():
    data = encode_device_path([file_node("a")]) + b"trailing garbage"
    assert parse_device_path(data) == [file_node("a")]


def test_parse_errors():
    with pytest.raises(ValueError):
        parse_device_path(b"")
    with pytest.raises(ValueError):
        parse_device_path(b"\x04\x04\x02\x00")
    with pytest.raises(ValueError):
        parse_device_path(b"\x04\x04\x40\x00abc")
    with pytest.raises(ValueError):
        parse_device_path(file_node("x").encode())


def test_find_url():
    nodes = [
        DevicePathNode(DevicePathType.HARDWARE, 1, b"\x00\x01"),
        uri_node("http://example.com/boot.efi"),
        uri_node("http://example.com/other.efi"),
    ]
    assert find_url(nodes) == "http://example.com/boot.efi"


def test_find_url_stops_at_nul():
    node = DevicePathNode(DevicePathType.MESSAGING, MSG_URI_DP, b"http://example.com/x\0junk")
    assert find_url([node]) == "http://example.com/x"


def test_find_url_missing():
    assert find_url([file_node("a")]) is None
    assert find_url([]) is None


def test_file_path_text_joins_nodes():
    assert file_path_text([file_node("\\EFI"), file_node("Linux\\a.efi")]) == "\\EFI/Linux\\a.efi"


def test_file_path_text_rejects_other_nodes():
    assert file_path_text([file_node("a"), uri_node("http://example.com/")]) is None


def test_file_path_text_through_wire():
    data = encode_device_path([file_node("\\loader\\entry.efi")])
    assert file_path_text(parse_device_path(data)) == "\\loader\\entry.efi"