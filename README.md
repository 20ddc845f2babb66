# ggmlfmt

`ggmlfmt` reads and writes GGML-family tensor container files. It handles
the unversioned GGML layout, the versioned GGMF and GGJT layouts, and the
GGLA layout that LoRA adapters use.

It deals only with the file layout: magic numbers, hyperparameters, the
embedded vocabulary and the tensor table.

## Installation

```
pip install ggmlfmt
```

For the test suite:

```
pip install "ggmlfmt[test]"
pytest
```

## Modules

- `ggmlfmt.binio`: little-endian primitives. It has `read_u32`, `read_i32`,
  `read_f32`, `read_bool` and `read_bytes`, the matching `write_*` functions,
  and `has_data_left`.
- `ggmlfmt.types`: `ContainerKind`, `ContainerType` (with `read`, `write` and
  `supports_mmap`), `ElementType` (with `is_quantized` and `from_raw`),
  `RoPEOverrides`, and the size helpers `type_size`, `blck_size`,
  `type_sizef` and `data_size`.
- `ggmlfmt.accelerator`: `Accelerator`, `Backend` and `get_accelerator`.
  `get_accelerator` always returns `Accelerator.NONE`.
- `ggmlfmt.errors`: `LoadError` and `SaveError` and their subclasses. These
  include `InvalidMagicError`, `InvalidFormatVersionError`,
  `UnsupportedElementTypeError`, `LoadInvariantError`,
  `LoadImplementationError`, `SaveInvariantError`, `SaveImplementationError`
  and `VocabularyScoringNotSupportedError`.
- `ggmlfmt.loader`: `load`, the `LoadHandler` base class, `TensorLoadInfo`
  and `PartialHyperparameters`.
- `ggmlfmt.saver`: `save`, the `SaveHandler` base class, `TensorSaveInfo`
  and `SaveContainerType`.
- `ggmlfmt.prompt`: prompt templating. It has `process_prompt`, `load_prompt`,
  `read_prompt_file`, `message_prompt_prefix` and `PromptError`.
- `ggmlfmt.cliopts`: option helpers. It has `QuantizationTarget`,
  `ContainerChoice`, `rope_overrides`, `autodetect_num_threads`,
  `num_threads`, `utf8_or_array` and `format_prompt_tokens`.
- `ggmlfmt.precommit`: the pre-commit runner. It has `run_command`, `main`
  and `CommandFailed`.

## Loading a file

`load` is event driven. You subclass `LoadHandler`, and `load` calls it as it
walks the file:

1. `container_type(container_type)` is called once, after the magic number is read.
2. `read_hyperparameters(reader)` reads the model's own hyperparameters from
   `reader`. It returns a `PartialHyperparameters` that gives the vocabulary size.
3. `vocabulary_token(index, token, score)` is called once for each token.
4. `tensor_buffer(info)` is called once for each tensor. `info` is a
   `TensorLoadInfo`, and `info.read_data(reader)` returns the tensor's raw bytes.

```python
from ggmlfmt.binio import read_u32
from ggmlfmt.loader import LoadHandler, PartialHyperparameters, load


class Collector(LoadHandler):
    def __init__(self):
        self.tokens = []
        self.tensors = {}

    def container_type(self, container_type):
        self.kind = container_type

    def read_hyperparameters(self, reader):
        return PartialHyperparameters(n_vocab=read_u32(reader))

    def vocabulary_token(self, index, token, score):
        self.tokens.append((token, score))

    def tensor_buffer(self, info):
        self.tensors[info.name] = info


with open("model.bin", "rb") as f:
    handler = Collector()
    load(f, handler)
```

When `load` cannot read a file, it raises a subclass of `LoadError`. Any
exception raised by the handler is wrapped in `LoadImplementationError`.

## Saving a file

`save(writer, handler, container_type, vocabulary, tensor_names)` writes a
GGML or GGJT v3 container. You pick the container with `SaveContainerType`.
`handler` is a `SaveHandler`:

- `write_hyperparameters(writer)` writes the hyperparameters.
- `tensor_data(tensor_name)` returns a `TensorSaveInfo` for each name in
  `tensor_names`.

`vocabulary` is a sequence of `(token_bytes, score)` pairs. The GGML container
cannot store scores. If you save a vocabulary with a non-zero score in a GGML
container, `save` raises `VocabularyScoringNotSupportedError`. In GGJT output,
each tensor's data starts on a 32-byte boundary.

## Pre-commit check

```
ggmlfmt-precommit
```

This command runs these cargo commands in order, and stops at the first one
that fails:

- `check`
- `test --all`
- `fmt --check --all`
- `doc` (with `RUSTDOCFLAGS=-Dwarnings`)
- `clippy`

It exits with status 1 on failure.

## What it does not do

`ggmlfmt` does not evaluate, quantize or run models, and it has no tensor
computation. `QuantizationTarget` and `ContainerChoice` only name the formats.
There is no inference, chat or REPL command, and no way to save or restore
sessions.