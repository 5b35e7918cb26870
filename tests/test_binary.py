import uuid

import pytest

from ssmsession.binary import (
    FieldError,
    get_bytes,
    get_integer,
    get_long,
    get_string,
    get_uinteger,
    get_ulong,
    get_uuid,
    integer_to_bytes,
    long_to_bytes,
    put_bytes,
    put_integer,
    put_long,
    put_string,
    put_uinteger,
    put_ulong,
    put_uuid,
)

MESSAGE_ID = "dd01e56b-ff48-483e-a508-b5f073f31b16"


def buf(n):
    return bytearray(n)


@pytest.mark.parametrize(
    "start,end,value,expected",
    [
        (0, 7, "hello", b"hello   "),
        (1, 7, "hello", b"\x00hello  "),
    ],
)
def test_put_string(start, end, value, expected):
    data = buf(8)
    put_string(data, start, end, value)
    assert bytes(data) == expected
    assert b"hello" in data


@pytest.mark.parametrize(
    "start,end,value,message",
    [
        (-1, 7, "hello", "Offset is outside"),
        (0, 7, "longinputstring", "Not enough space"),
    ],
)
def test_put_string_errors(start, end, value, message):
    with pytest.raises(FieldError, match=message):
        put_string(buf(8), start, end, value)


@pytest.mark.parametrize(
    "start,end,value,expected",
    [
        (0, 3, b"\x22\x55\xff\x22", b"\x22\x55\xff\x22\x00\x00\x00\x00"),
        (1, 4, b"\x22\x55\xff\x22", b"\x00\x22\x55\xff\x22\x00\x00\x00"),
    ],
)
def test_put_bytes(start, end, value, expected):
    data = buf(8)
    put_bytes(data, start, end, value)
    assert bytes(data) == expected


@pytest.mark.parametrize(
    "start,end,message",
    [
        (-1, 7, "Offset is outside"),
        (0, 2, "Not enough space"),
    ],
)
def test_put_bytes_errors(start, end, message):
    with pytest.raises(FieldError, match=message):
        put_bytes(buf(8), start, end, b"\x22\x55\x00\x22")


def test_long_to_bytes():
    assert long_to_bytes(5747283) == bytes([0, 0, 0, 0, 0, 0x57, 0xB2, 0x53])


@pytest.mark.parametrize(
    "size,offset,value,expected",
    [
        (9, 0, 5747283, bytes([0, 0, 0, 0, 0, 0x57, 0xB2, 0x53, 0])),
        (10, 1, 92837273, bytes([0, 0, 0, 0, 0, 0x05, 0x88, 0x95, 0x99, 0])),
        (8, 0, 50, bytes([0, 0, 0, 0, 0, 0, 0, 0x32])),
    ],
)
def test_put_long(size, offset, value, expected):
    data = buf(size)
    put_long(data, offset, value)
    assert bytes(data) == expected


@pytest.mark.parametrize(
    "size,offset,value",
    [(8, 1, 50), (9, -1, 5748), (4, 10, 938283)],
)
def test_put_long_errors(size, offset, value):
    with pytest.raises(FieldError, match="Offset is outside"):
        put_long(buf(size), offset, value)


@pytest.mark.parametrize(
    "size,offset,value,expected",
    [
        (5, 0, 324, bytes([0, 0, 0x01, 0x44, 0])),
        (8, 1, 520392, bytes([0, 0, 0x07, 0xF0, 0xC8, 0, 0, 0])),
        (4, 0, 50, bytes([0, 0, 0, 0x32])),
    ],
)
def test_put_integer(size, offset, value, expected):
    data = buf(size)
    put_integer(data, offset, value)
    assert bytes(data) == expected


@pytest.mark.parametrize(
    "size,offset,value",
    [(8, 5, 50), (9, -1, 5748), (4, 10, 938283)],
)
def test_put_integer_errors(size, offset, value):
    with pytest.raises(FieldError, match="Offset is outside"):
        put_integer(buf(size), offset, value)


@pytest.mark.parametrize(
    "data,offset,length,expected",
    [
        (bytes([0x72, 0x77, 0x00]), 0, 2, "rw"),
        (bytes([0x00, 0x00, 0x72, 0x77, 0x00]), 2, 2, "rw"),
    ],
)
def test_get_string(data, offset, length, expected):
    assert get_string(data, offset, length) == expected


@pytest.mark.parametrize(
    "data,offset,length",
    [(bytes(9), -1, 0), (bytes(4), 10, 2)],
)
def test_get_string_errors(data, offset, length):
    with pytest.raises(FieldError, match="Offset is outside"):
        get_string(data, offset, length)


@pytest.mark.parametrize(
    "data,offset,length,expected",
    [
        (bytes([0x72, 0x77, 0x00]), 0, 2, bytes([0x72, 0x77])),
        (bytes([0x00, 0x00, 0x72, 0x77, 0x00]), 2, 2, bytes([0x72, 0x77])),
    ],
)
def test_get_bytes(data, offset, length, expected):
    assert get_bytes(data, offset, length) == expected


@pytest.mark.parametrize(
    "data,offset,length",
    [(bytes(8), -1, 0), (bytes(4), 10, 2)],
)
def test_get_bytes_errors(data, offset, length):
    with pytest.raises(FieldError, match="Offset is outside"):
        get_bytes(data, offset, length)


@pytest.mark.parametrize(
    "data,offset,expected",
    [
        (bytes([0, 0, 0, 0, 0, 0x5A, 0x05, 0x66, 0]), 0, 5899622),
        (bytes([0, 0, 0, 0, 0, 0, 0, 0x5A, 0x05, 0x6A, 0]), 2, 5899626),
        (bytes([0, 0, 0, 0, 0, 0, 0, 0x32]), 0, 50),
    ],
)
def test_get_long(data, offset, expected):
    assert get_long(data, offset) == expected


@pytest.mark.parametrize(
    "data,offset",
    [(bytes(8), 1), (bytes(9), -1), (bytes(4), 10)],
)
def test_get_long_errors(data, offset):
    with pytest.raises(FieldError, match="Offset is outside"):
        get_long(data, offset)


def test_put_uuid_layout():
    data = buf(16)
    put_uuid(data, 0, uuid.UUID(MESSAGE_ID))
    assert bytes(data) == bytes.fromhex("a508b5f073f31b16dd01e56bff48483e")


def test_put_uuid_accepts_string():
    data = buf(16)
    put_uuid(data, 0, MESSAGE_ID)
    assert get_uuid(data, 0) == uuid.UUID(MESSAGE_ID)


def test_put_uuid_nil():
    with pytest.raises(FieldError, match="null"):
        put_uuid(buf(16), 0, uuid.UUID("00000000-0000-0000-0000-000000000000"))


def test_put_uuid_none():
    with pytest.raises(FieldError, match="null"):
        put_uuid(buf(16), 0, None)


def test_put_uuid_bad_offset():
    with pytest.raises(FieldError, match="Offset is outside"):
        put_uuid(buf(8), 8, MESSAGE_ID)


def test_get_uuid_round_trip_at_offset():
    data = buf(20)
    put_uuid(data, 3, MESSAGE_ID)
    assert str(get_uuid(data, 3)) == MESSAGE_ID


def test_get_uuid_out_of_bounds():
    with pytest.raises(FieldError, match="Offset is outside"):
        get_uuid(bytes(16), 1)


def test_put_get_string():
    data = bytearray([0, 0, 0, 0, 0, 0, 0, 0, 1, 1, 0, 1])
    put_string(data, 1, 8, "hello")
    assert get_string(data, 1, 8) == "hello"


def test_put_get_integer():
    data = bytearray([0x00, 0x00, 0x00, 0x00, 0xFF, 0x00])
    put_integer(data, 1, 256)
    assert data[1:5] == bytearray([0x00, 0x00, 0x01, 0x00])
    assert get_integer(data, 1) == 256
    assert get_integer(data, 2) == 65536
    with pytest.raises(FieldError):
        get_integer(data, 3)


def test_put_get_long():
    data = bytearray([0, 0, 0, 0, 0, 0, 1, 0, 1, 0, 0, 0])
    put_long(data, 1, 4294967296)
    assert data[1:9] == bytearray([0, 0, 0, 1, 0, 0, 0, 0])
    assert get_long(data, 1) == 4294967296


def test_integer_to_bytes():
    assert integer_to_bytes(256) == bytes([0x00, 0x00, 0x01, 0x00])


def test_integer_to_bytes_overflow():
    with pytest.raises(FieldError):
        integer_to_bytes(2**31)


def test_signed_and_unsigned_reads():
    data = b"\xff" * 8
    assert get_integer(data, 0) == -1
    assert get_uinteger(data, 0) == 0xFFFFFFFF
    assert get_long(data, 0) == -1
    assert get_ulong(data, 0) == 0xFFFFFFFFFFFFFFFF


def test_put_unsigned():
    data = buf(12)
    put_uinteger(data, 0, 0xFFFFFFFF)
    put_ulong(data, 4, 1503434274948)
    assert bytes(data[:4]) == b"\xff\xff\xff\xff"
    assert get_ulong(data, 4) == 1503434274948


def test_put_uinteger_rejects_negative():
    with pytest.raises(FieldError):
        put_uinteger(buf(4), 0, -1)