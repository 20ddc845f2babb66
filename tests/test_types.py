import io
import struct

import pytest

from ggmlfmt import binio
from ggmlfmt.types import (
    FILE_MAGIC_GGJT,
    FILE_MAGIC_GGLA,
    FILE_MAGIC_GGMF,
    FILE_MAGIC_GGML,
    ContainerKind,
    ContainerType,
    ElementType,
    RoPEOverrides,
    blck_size,
    data_size,
    type_size,
    type_sizef,
)

ALL_CONTAINERS = [
    ContainerType(ContainerKind.GGML),
    ContainerType(ContainerKind.GGMF, 1),
    ContainerType(ContainerKind.GGJT, 3),
    ContainerType(ContainerKind.GGLA, 1),
]


@pytest.mark.parametrize(
    "magic, kind, version, raw",
    [
        (0x67676D6C, ContainerKind.GGML, None, b"lmgg"),
        (0x67676D66, ContainerKind.GGMF, 1, b"fmgg"),
        (0x67676A74, ContainerKind.GGJT, 3, b"tjgg"),
        (0x67676C61, ContainerKind.GGLA, 1, b"algg"),
    ],
)
def test_magic_constants(magic, kind, version, raw):
    container = ContainerType(kind) if version is None else ContainerType(kind, version)
    buf = io.BytesIO()
    container.write(buf)
    written = buf.getvalue()
    assert written[:4] == raw
    assert struct.unpack("<I", written[:4])[0] == magic
    assert magic in (FILE_MAGIC_GGML, FILE_MAGIC_GGMF, FILE_MAGIC_GGJT, FILE_MAGIC_GGLA)


@pytest.mark.parametrize("container", ALL_CONTAINERS)
def test_container_round_trip(container):
    buf = io.BytesIO()
    container.write(buf)
    buf.seek(0)
    assert ContainerType.read(buf) == container
    assert buf.read() == b""


def test_ggml_container_writes_only_magic():
    buf = io.BytesIO()
    ContainerType(ContainerKind.GGML).write(buf)
    buf.seek(0)
    assert binio.read_u32(buf) == FILE_MAGIC_GGML
    assert buf.read() == b""


def test_versioned_container_writes_version_after_magic():
    buf = io.BytesIO()
    ContainerType(ContainerKind.GGJT, 3).write(buf)
    buf.seek(0)
    assert binio.read_u32(buf) == FILE_MAGIC_GGJT
    assert binio.read_u32(buf) == 3


def test_unknown_magic_raises():
    buf = io.BytesIO()
    binio.write_u32(buf, 0x12345678)
    buf.seek(0)
    with pytest.raises(ValueError) as excinfo:
        ContainerType.read(buf)
    assert excinfo.value.magic == 0x12345678


def test_truncated_container_raises_eof():
    buf = io.BytesIO()
    binio.write_u32(buf, FILE_MAGIC_GGJT)
    buf.seek(0)
    with pytest.raises(EOFError):
        ContainerType.read(buf)


@pytest.mark.parametrize(
    "kind, version, expected",
    [
        (ContainerKind.GGML, None, False),
        (ContainerKind.GGMF, 1, False),
        (ContainerKind.GGJT, 3, True),
        (ContainerKind.GGJT, 1, True),
        (ContainerKind.GGLA, 1, False),
    ],
)
def test_supports_mmap_only_for_ggjt(kind, version, expected):
    container = ContainerType(kind) if version is None else ContainerType(kind, version)
    assert container.supports_mmap() is expected


def test_container_version_validation():
    with pytest.raises(ValueError):
        ContainerType(ContainerKind.GGML, 1)
    with pytest.raises(ValueError):
        ContainerType(ContainerKind.GGJT)


def test_container_str():
    assert str(ContainerType(ContainerKind.GGML)) == "Ggml"
    assert str(ContainerType(ContainerKind.GGJT, 3)) == "Ggjt(3)"


@pytest.mark.parametrize(
    "element_type, text",
    [
        (ElementType.Q4_0, "q4_0"),
        (ElementType.Q2_K, "q2_k"),
        (ElementType.F16, "f16"),
        (ElementType.I32, "i32"),
    ],
)
def test_element_type_display(element_type, text):
    assert str(element_type) == text


def test_is_quantized():
    assert ElementType.Q4_0.is_quantized() is True
    assert ElementType.Q4_1.is_quantized() is True
    assert ElementType.Q5_0.is_quantized() is True
    assert ElementType.Q5_1.is_quantized() is True
    assert ElementType.Q8_0.is_quantized() is True
    assert ElementType.Q8_1.is_quantized() is True
    assert ElementType.Q2_K.is_quantized() is True
    assert ElementType.Q3_K.is_quantized() is True
    assert ElementType.Q4_K.is_quantized() is True
    assert ElementType.Q5_K.is_quantized() is True
    assert ElementType.Q6_K.is_quantized() is True
    assert ElementType.I32.is_quantized() is False
    assert ElementType.F16.is_quantized() is False
    assert ElementType.F32.is_quantized() is False
    assert ElementType.I8.is_quantized() is False


@pytest.mark.parametrize("element_type", list(ElementType))
def test_from_raw_round_trip(element_type):
    assert ElementType.from_raw(element_type.value) is element_type


def test_from_raw_rejects_unknown():
    with pytest.raises(ValueError):
        ElementType.from_raw(999)


def test_pinned_sizes():
    assert type_size(ElementType.F32) == 4
    assert type_size(ElementType.F16) == 2
    assert blck_size(ElementType.Q4_0) == 32


@pytest.mark.parametrize("element_type", list(ElementType))
def test_sizes_are_consistent(element_type):
    assert type_size(element_type) > 0
    assert blck_size(element_type) >= 1
    assert type_sizef(element_type) * blck_size(element_type) == pytest.approx(
        type_size(element_type)
    )
    assert data_size(element_type, blck_size(element_type)) == type_size(element_type)


def test_unquantized_types_have_unit_blocks():
    for element_type in ElementType:
        if not element_type.is_quantized():
            assert blck_size(element_type) == 1
            assert data_size(element_type, 10) == 10 * type_size(element_type)


def test_quantized_types_are_smaller_than_f32():
    for element_type in ElementType:
        if element_type.is_quantized():
            assert type_sizef(element_type) < type_sizef(ElementType.F32)


def test_rope_overrides_defaults():
    overrides = RoPEOverrides()
    assert overrides.frequency_base == 10_000
    assert overrides.frequency_scale == 1.0