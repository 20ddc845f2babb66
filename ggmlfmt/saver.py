"""Writing GGML model files from a user-supplied handler."""

from __future__ import annotations

import abc
import enum
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import BinaryIO, TypeVar

from ggmlfmt.binio import write_f32, write_i32, write_u32
from ggmlfmt.errors import (
    SaveError,
    SaveImplementationError,
    SaveInvariantError,
    VocabularyScoringNotSupportedError,
)
from ggmlfmt.types import ContainerKind, ContainerType, ElementType

_T = TypeVar("_T")
_ALIGNMENT = 32


@dataclass
class TensorSaveInfo:
    """A tensor to be written: its shape, element type and raw data."""

    n_dims: int
    dims: tuple[int, int]
    element_type: ElementType
    data: bytes


class SaveContainerType(enum.Enum):
    """Containers a model can be saved in."""

    GGML = "ggml"
    GGJT_V3 = "ggjt-v3"

    def to_container_type(self) -> ContainerType:
        """The container type written to the file."""
        if self is SaveContainerType.GGML:
            return ContainerType(ContainerKind.GGML)
        return ContainerType(ContainerKind.GGJT, 3)


class SaveHandler(abc.ABC):
    """Supplies the parts of a model as they are written to a file."""

    @abc.abstractmethod
    def write_hyperparameters(self, writer: BinaryIO) -> None:
        """Write the model-specific hyperparameters to ``writer``."""

    @abc.abstractmethod
    def tensor_data(self, tensor_name: str) -> TensorSaveInfo:
        """Return the tensor called ``tensor_name``."""


def _call(func: Callable[..., _T], *args: object) -> _T:
    try:
        return func(*args)
    except Exception as exc:
        raise SaveImplementationError(exc) from exc


@contextmanager
def _integer_conversions() -> Iterator[None]:
    try:
        yield
    except OverflowError as exc:
        raise SaveError("invalid integer conversion") from exc


def save(
    writer: BinaryIO,
    handler: SaveHandler,
    container_type: SaveContainerType,
    vocabulary: Sequence[tuple[bytes, float]],
    tensor_names: Sequence[str],
) -> None:
    """Write a model to a seekable ``writer``.

    A GGML container cannot store vocabulary scores, so every score must be 0.0.
    """
    is_ggml = container_type is SaveContainerType.GGML
    with _integer_conversions():
        container_type.to_container_type().write(writer)

        if is_ggml and any(score != 0.0 for _, score in vocabulary):
            raise VocabularyScoringNotSupportedError()

        _call(handler.write_hyperparameters, writer)

        for token, score in vocabulary:
            write_u32(writer, len(token))
            writer.write(token)
            if not is_ggml:
                write_f32(writer, score)

        for name in tensor_names:
            info = _call(handler.tensor_data, name)
            dims = tuple(info.dims)

            if info.element_type in (ElementType.Q4_0, ElementType.Q4_1) and dims[0] % 64 != 0:
                raise SaveInvariantError(f"[{dims[0]}, {dims[1]}][0] % 64 == 0")

            encoded_name = name.encode("utf-8")
            write_i32(writer, info.n_dims)
            write_i32(writer, len(encoded_name))
            write_u32(writer, info.element_type.value)
            for dim in dims[: info.n_dims]:
                write_i32(writer, dim)
            writer.write(encoded_name)

            if not is_ggml:
                padding = (-writer.tell()) % _ALIGNMENT
                writer.write(b"\0" * padding)

            writer.write(info.data)