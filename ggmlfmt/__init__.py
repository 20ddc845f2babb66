"""Reading and writing GGML-family model container files, with prompt and option helpers."""

__version__ = "0.1.0"

__all__ = [
    "accelerator",
    "binio",
    "cliopts",
    "errors",
    "loader",
    "precommit",
    "prompt",
    "saver",
    "types",
]