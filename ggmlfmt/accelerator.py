"""Hardware acceleration descriptors for GGML tensors."""

from __future__ import annotations

import enum


class Accelerator(enum.Enum):
    """Accelerators a GGML build can be compiled with."""

    CUBLAS = "cublas"
    CLBLAST = "clblast"
    METAL = "metal"
    NONE = "none"


class Backend(enum.Enum):
    """Where a tensor's data lives, valued by its on-disk identifier."""

    CPU = 0
    GPU = 10
    GPU_SPLIT = 20

    @classmethod
    def from_raw(cls, value: int) -> Backend:
        """Look up a backend by its raw identifier."""
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"unknown backend {value}") from None


def get_accelerator() -> Accelerator:
    """Return the accelerator in use; computation here always runs on the CPU."""
    return Accelerator.NONE