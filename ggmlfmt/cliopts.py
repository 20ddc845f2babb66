"""Option values and helpers shared by the model command-line tools."""

from __future__ import annotations

import enum
import os
import platform
import subprocess
from collections.abc import Iterable

import psutil

from ggmlfmt.saver import SaveContainerType
from ggmlfmt.types import ElementType, RoPEOverrides


class QuantizationTarget(enum.Enum):
    """Element types a model can be quantized to."""

    Q4_0 = "q4_0"
    Q4_1 = "q4_1"
    Q5_0 = "q5_0"
    Q5_1 = "q5_1"
    Q8_0 = "q8_0"

    def __str__(self) -> str:
        return self.value

    def to_element_type(self) -> ElementType:
        """The element type tensors are quantized to."""
        return ElementType[self.name]


class ContainerChoice(enum.Enum):
    """Containers a quantized model can be written in."""

    GGML = "ggml"
    GGJT_V3 = "ggjt-v3"

    def __str__(self) -> str:
        return self.value

    def to_save_container_type(self) -> SaveContainerType:
        """The save container type this choice stands for."""
        if self is ContainerChoice.GGML:
            return SaveContainerType.GGML
        return SaveContainerType.GGJT_V3


def rope_overrides(
    frequency_base: int | None, frequency_scale: float | None
) -> RoPEOverrides | None:
    """Build RoPE overrides, or ``None`` when neither value is given."""
    if frequency_base is None and frequency_scale is None:
        return None
    default = RoPEOverrides()
    return RoPEOverrides(
        frequency_scale=default.frequency_scale if frequency_scale is None else frequency_scale,
        frequency_base=default.frequency_base if frequency_base is None else frequency_base,
    )


def _physical_cpus() -> int:
    count = psutil.cpu_count(logical=False)
    if count:
        return count
    return os.cpu_count() or 1


def autodetect_num_threads() -> int:
    """Number of threads to use when none is requested.

    On Apple silicon this is the number of performance cores; elsewhere it
    is the number of physical cores.
    """
    if platform.system() == "Darwin" and platform.machine() == "arm64":
        try:
            result = subprocess.run(
                ["sysctl", "-n", "hw.perflevel0.physicalcpu"],
                capture_output=True,
                text=True,
                check=False,
            )
            return int(result.stdout.strip())
        except (OSError, ValueError):
            pass
    return _physical_cpus()


def num_threads(requested: int | None) -> int:
    """The requested thread count, or the detected one if none was requested."""
    return autodetect_num_threads() if requested is None else requested


def utf8_or_array(token: bytes) -> str:
    """Show a token as text if it is valid UTF-8, otherwise as a list of bytes."""
    try:
        return token.decode("utf-8")
    except UnicodeDecodeError:
        return "[" + ", ".join(str(byte) for byte in token) + "]"


_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t", "\0": "\\0"}


def _quote(text: str) -> str:
    parts = []
    for char in text:
        if char in _ESCAPES:
            parts.append(_ESCAPES[char])
        elif not char.isprintable() and char != " ":
            parts.append(f"\\u{{{ord(char):x}}}")
        else:
            parts.append(char)
    return '"' + "".join(parts) + '"'


def format_prompt_tokens(tokens: Iterable[tuple[str, int]]) -> tuple[str, str]:
    """Render tokenized text as a line of ids and a line of quoted ``text:id`` pairs."""
    pairs = list(tokens)
    ids = ", ".join(str(token_id) for _, token_id in pairs)
    labelled = ", ".join(f"{_quote(text)}:{token_id}" for text, token_id in pairs)
    return ids, labelled