"""Building prompts from templates, files and command-line values."""

from __future__ import annotations

import os
from pathlib import Path

PLACEHOLDER = "{{PROMPT}}"

_MESSAGE_PROMPT_PREFIX_ERROR = (
    "Message prompt prefix must not contain a `{{PROMPT}}` placeholder. "
    "The prompt will be automatically appended to the prefix."
)

StrPath = str | os.PathLike[str]


class PromptError(Exception):
    """A prompt could not be assembled from the given options."""


def process_prompt(raw_prompt: str, prompt: str) -> str:
    """Replace every ``{{PROMPT}}`` placeholder in ``raw_prompt`` with ``prompt``."""
    return raw_prompt.replace(PLACEHOLDER, prompt)


def read_prompt_file(path: StrPath) -> str:
    """Read a UTF-8 prompt file, keeping its contents exactly as stored."""
    location = Path(path)
    try:
        return location.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise PromptError(f"Could not read prompt file at {str(location)!r}") from exc


def message_prompt_prefix(prefix: str | None, prefix_file: StrPath | None) -> str:
    """Resolve the per-message chat prefix from exactly one of its two sources.

    The prefix must not contain the ``{{PROMPT}}`` placeholder, since the
    user's message is appended to it.
    """
    if prefix is None and prefix_file is None:
        raise PromptError(
            "Must specify either --message-prompt-prefix or --message-prompt-prefix-file"
        )
    if prefix is not None and prefix_file is not None:
        raise PromptError(
            "Cannot specify both --message-prompt-prefix and --message-prompt-prefix-file"
        )
    text = prefix if prefix is not None else read_prompt_file(prefix_file)
    if PLACEHOLDER in text:
        raise PromptError(_MESSAGE_PROMPT_PREFIX_ERROR)
    return text


def load_prompt(prompt_file: StrPath | None, prompt: str | None) -> str:
    """Combine an optional prompt file and an optional prompt into one prompt.

    With both, the file is a template whose placeholder is filled by ``prompt``.
    """
    contents = read_prompt_file(prompt_file) if prompt_file is not None else None
    if contents is not None and prompt is None:
        return contents
    if contents is None and prompt is not None:
        return prompt
    if contents is not None and prompt is not None:
        return process_prompt(contents, prompt)
    raise PromptError("No prompt or prompt file was provided. See --help")