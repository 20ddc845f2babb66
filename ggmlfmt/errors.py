"""Errors raised while loading or saving GGML files."""

from __future__ import annotations

from dataclasses import dataclass

from ggmlfmt.types import ContainerType


@dataclass(frozen=True, repr=False)
class FormatMagic:
    """A file magic number, displayed as hex followed by its bytes as text."""

    value: int

    def __str__(self) -> str:
        text = self.value.to_bytes(4, "little").decode("utf-8", errors="replace")
        return f"{self.value:x} ({text})"

    def __repr__(self) -> str:
        return str(self)


class LoadError(Exception):
    """Base class for errors raised while loading a model."""


class InvalidMagicError(LoadError):
    """The file does not start with a known magic number."""

    def __init__(self, magic: FormatMagic) -> None:
        super().__init__(f"invalid file magic number: {magic}")
        self.magic = magic


class InvalidFormatVersionError(LoadError):
    """The container has a version that is not supported."""

    def __init__(self, container_type: ContainerType) -> None:
        super().__init__(f"invalid ggml format: format={container_type}")
        self.container_type = container_type


class UnsupportedElementTypeError(LoadError):
    """A tensor uses an element type that is not known."""

    def __init__(self, tensor_name: str, ftype: int) -> None:
        super().__init__(f"unsupported tensor type {ftype} for tensor {tensor_name}")
        self.tensor_name = tensor_name
        self.ftype = ftype


class LoadInvariantError(LoadError):
    """The file broke an invariant of the format."""

    def __init__(self, description: str) -> None:
        super().__init__(f"invariant broken: {description}")
        self.description = description


class LoadImplementationError(LoadError):
    """The load handler raised an error."""

    def __init__(self, error: BaseException) -> None:
        super().__init__("implementation error")
        self.error = error
        self.__cause__ = error


class SaveError(Exception):
    """Base class for errors raised while saving a model."""


class SaveInvariantError(SaveError):
    """The data to save broke an invariant of the format."""

    def __init__(self, description: str) -> None:
        super().__init__(f"invariant broken: {description}")
        self.description = description


class SaveImplementationError(SaveError):
    """The save handler raised an error."""

    def __init__(self, error: BaseException) -> None:
        super().__init__("implementation error")
        self.error = error
        self.__cause__ = error


class VocabularyScoringNotSupportedError(SaveError):
    """A scored vocabulary was given for a container that cannot store scores."""

    def __init__(self) -> None:
        super().__init__("container type does not support vocabulary scoring")