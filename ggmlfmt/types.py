"""Container and element types of the GGML tensor file format."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import BinaryIO

from ggmlfmt.binio import read_u32, write_u32

FILE_MAGIC_GGML = 0x67676D6C
FILE_MAGIC_GGMF = 0x67676D66
FILE_MAGIC_GGJT = 0x67676A74
FILE_MAGIC_GGLA = 0x67676C61

QNT_VERSION = 2
QNT_VERSION_FACTOR = 1000
MAX_NAME_LENGTH = 48
DEFAULT_EPS = 5e-6


class _UnknownMagicError(ValueError):
    """Raised when a stream does not start with a known GGML magic number."""

    def __init__(self, magic: int) -> None:
        super().__init__(f"invalid file magic number: {magic:x}")
        self.magic = magic


class ContainerKind(enum.Enum):
    """The family of a GGML file, identified by its magic number."""

    GGML = FILE_MAGIC_GGML
    GGMF = FILE_MAGIC_GGMF
    GGJT = FILE_MAGIC_GGJT
    GGLA = FILE_MAGIC_GGLA


@dataclass(frozen=True)
class ContainerType:
    """A container kind together with its version (unversioned for GGML)."""

    kind: ContainerKind
    version: int | None = None

    def __post_init__(self) -> None:
        if self.kind is ContainerKind.GGML:
            if self.version is not None:
                raise ValueError("GGML containers are unversioned")
        elif self.version is None:
            raise ValueError(f"{self.kind.name} containers require a version")

    def __str__(self) -> str:
        name = self.kind.name.capitalize()
        return name if self.version is None else f"{name}({self.version})"

    def supports_mmap(self) -> bool:
        """Whether tensor data in this container can be memory-mapped."""
        return self.kind is ContainerKind.GGJT

    @classmethod
    def read(cls, reader: BinaryIO) -> ContainerType:
        """Read the magic number and, where present, the version."""
        magic = read_u32(reader)
        try:
            kind = ContainerKind(magic)
        except ValueError:
            raise _UnknownMagicError(magic) from None
        if kind is ContainerKind.GGML:
            return cls(kind)
        return cls(kind, read_u32(reader))

    def write(self, writer: BinaryIO) -> None:
        """Write the magic number and, where present, the version."""
        write_u32(writer, self.kind.value)
        if self.version is not None:
            write_u32(writer, self.version)


class ElementType(enum.Enum):
    """The type of a tensor element, valued by its on-disk identifier."""

    F32 = 0
    F16 = 1
    Q4_0 = 2
    Q4_1 = 3
    Q5_0 = 6
    Q5_1 = 7
    Q8_0 = 8
    Q8_1 = 9
    Q2_K = 10
    Q3_K = 11
    Q4_K = 12
    Q5_K = 13
    Q6_K = 14
    I8 = 16
    I32 = 18

    def __str__(self) -> str:
        return self.name.lower()

    def is_quantized(self) -> bool:
        """Whether this type stores quantized blocks."""
        return self not in _UNQUANTIZED

    @classmethod
    def from_raw(cls, value: int) -> ElementType:
        """Look up an element type by its on-disk identifier."""
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"unsupported element type {value}") from None


_UNQUANTIZED = frozenset({ElementType.F32, ElementType.F16, ElementType.I8, ElementType.I32})

_QK = 32
_QK_K = 256

# (block size in elements, block size in bytes)
_TYPE_TRAITS: dict[ElementType, tuple[int, int]] = {
    ElementType.F32: (1, 4),
    ElementType.F16: (1, 2),
    ElementType.Q4_0: (_QK, 2 + _QK // 2),
    ElementType.Q4_1: (_QK, 2 + 2 + _QK // 2),
    ElementType.Q5_0: (_QK, 2 + 4 + _QK // 2),
    ElementType.Q5_1: (_QK, 2 + 2 + 4 + _QK // 2),
    ElementType.Q8_0: (_QK, 2 + _QK),
    ElementType.Q8_1: (_QK, 4 + 4 + _QK),
    ElementType.Q2_K: (_QK_K, _QK_K // 16 + _QK_K // 4 + 2 + 2),
    ElementType.Q3_K: (_QK_K, _QK_K // 8 + _QK_K // 4 + 12 + 2),
    ElementType.Q4_K: (_QK_K, 2 + 2 + 12 + _QK_K // 2),
    ElementType.Q5_K: (_QK_K, 2 + 2 + 12 + _QK_K // 8 + _QK_K // 2),
    ElementType.Q6_K: (_QK_K, _QK_K // 2 + _QK_K // 4 + _QK_K // 16 + 2),
    ElementType.I8: (1, 1),
    ElementType.I32: (1, 4),
}


@dataclass
class RoPEOverrides:
    """Overrides for rotary positional encoding frequencies."""

    frequency_scale: float = 1.0
    frequency_base: int = 10_000


def type_size(element_type: ElementType) -> int:
    """Size in bytes of one block of ``element_type``."""
    return _TYPE_TRAITS[element_type][1]


def blck_size(element_type: ElementType) -> int:
    """Number of elements in one block of ``element_type``."""
    return _TYPE_TRAITS[element_type][0]


def type_sizef(element_type: ElementType) -> float:
    """Average size in bytes of one element of ``element_type``."""
    return type_size(element_type) / blck_size(element_type)


def data_size(element_type: ElementType, n_elements: int) -> int:
    """Bytes occupied by ``n_elements`` elements of ``element_type``."""
    return (type_size(element_type) * n_elements) // blck_size(element_type)