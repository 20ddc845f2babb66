"""Reading GGML model files through a user-supplied handler."""

from __future__ import annotations

import abc
import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import BinaryIO, TypeVar

from ggmlfmt.binio import has_data_left, read_bytes, read_f32, read_i32, read_u32
from ggmlfmt.errors import (
    FormatMagic,
    InvalidFormatVersionError,
    InvalidMagicError,
    LoadError,
    LoadImplementationError,
    LoadInvariantError,
    UnsupportedElementTypeError,
)
from ggmlfmt.types import (
    ContainerKind,
    ContainerType,
    ElementType,
    _UnknownMagicError,
    data_size,
    type_size,
)

_T = TypeVar("_T")

_SUPPORTED_VERSIONS: dict[ContainerKind, frozenset[int]] = {
    ContainerKind.GGMF: frozenset({1}),
    ContainerKind.GGJT: frozenset({1, 2, 3}),
    ContainerKind.GGLA: frozenset({1}),
}
_MAX_DIMS = 2
_ALIGNMENT = 32


@dataclass
class TensorLoadInfo:
    """Description of a tensor found in a file; ``start_offset`` is absolute."""

    name: str
    n_dims: int
    dims: tuple[int, int]
    n_elements: int
    element_type: ElementType
    start_offset: int

    def calc_size(self) -> int:
        """Size in bytes of the tensor's data."""
        return data_size(self.element_type, math.prod(self.dims[: self.n_dims]))

    def read_data(self, reader: BinaryIO) -> bytes:
        """Read the tensor's data from the file it was described by."""
        n_bytes = self.n_elements * type_size(self.element_type)
        reader.seek(self.start_offset)
        return read_bytes(reader, n_bytes)


@dataclass
class PartialHyperparameters:
    """The part of a model's hyperparameters that loading depends on."""

    n_vocab: int


class LoadHandler(abc.ABC):
    """Receives the parts of a model as they are read from a file."""

    @abc.abstractmethod
    def container_type(self, container_type: ContainerType) -> None:
        """Called once the container type is known."""

    @abc.abstractmethod
    def vocabulary_token(self, index: int, token: bytes, score: float) -> None:
        """Called for each token of the embedded vocabulary."""

    @abc.abstractmethod
    def read_hyperparameters(self, reader: BinaryIO) -> PartialHyperparameters:
        """Read the model-specific hyperparameters from ``reader``."""

    @abc.abstractmethod
    def tensor_buffer(self, info: TensorLoadInfo) -> None:
        """Called for each tensor found in the file."""


def _call(func: Callable[..., _T], *args: object) -> _T:
    try:
        return func(*args)
    except Exception as exc:
        raise LoadImplementationError(exc) from exc


def _to_usize(value: int) -> int:
    if value < 0:
        raise LoadError("invalid integer conversion")
    return value


def _is_supported(container_type: ContainerType) -> bool:
    if container_type.kind is ContainerKind.GGML:
        return True
    return container_type.version in _SUPPORTED_VERSIONS[container_type.kind]


def load(reader: BinaryIO, handler: LoadHandler) -> None:
    """Read a GGML model from a seekable ``reader``, reporting it to ``handler``."""
    try:
        container_type = ContainerType.read(reader)
    except _UnknownMagicError as exc:
        raise InvalidMagicError(FormatMagic(exc.magic)) from None

    if not _is_supported(container_type):
        raise InvalidFormatVersionError(container_type)

    _call(handler.container_type, container_type)
    hyperparameters = _call(handler.read_hyperparameters, reader)

    kind = container_type.kind
    scored = kind in (ContainerKind.GGMF, ContainerKind.GGJT)
    for index in range(hyperparameters.n_vocab):
        length = read_u32(reader)
        token = read_bytes(reader, length)
        score = read_f32(reader) if scored else 0.0
        _call(handler.vocabulary_token, index, token, score)

    _load_weights(reader, handler, align=kind in (ContainerKind.GGJT, ContainerKind.GGLA))


def _load_weights(reader: BinaryIO, handler: LoadHandler, *, align: bool) -> None:
    while has_data_left(reader):
        n_dims = _to_usize(read_i32(reader))
        name_len = read_i32(reader)
        ftype = read_u32(reader)

        if n_dims > _MAX_DIMS:
            raise LoadInvariantError(f"{n_dims} <= {_MAX_DIMS}")

        dims = [1] * _MAX_DIMS
        n_elements = 1
        for axis in range(n_dims):
            dim = _to_usize(read_i32(reader))
            dims[axis] = dim
            n_elements *= dim

        raw_name = read_bytes(reader, _to_usize(name_len))
        try:
            name = raw_name.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise LoadError("could not convert bytes to a UTF-8 string") from exc

        try:
            element_type = ElementType.from_raw(ftype)
        except ValueError:
            raise UnsupportedElementTypeError(name, ftype) from None

        if element_type in (ElementType.Q4_0, ElementType.Q4_1) and dims[0] % 64 != 0:
            raise LoadInvariantError(f"[{dims[0]}, {dims[1]}][0] % 64 == 0")

        offset = reader.tell()
        if align:
            offset = (offset + _ALIGNMENT - 1) & ~(_ALIGNMENT - 1)

        info = TensorLoadInfo(
            name=name,
            n_dims=n_dims,
            dims=(dims[0], dims[1]),
            n_elements=n_elements,
            element_type=element_type,
            start_offset=offset,
        )
        n_bytes = info.calc_size()
        _call(handler.tensor_buffer, info)
        reader.seek(offset + n_bytes)