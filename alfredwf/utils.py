"""Utility functions for alfredwf."""

from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import TypeVar, Union

T = TypeVar("T")

# =============================================================================
# Constants
# =============================================================================

# File mode for scripts copied into a bundle
SCRIPT_MODE: int = 0o755

# Per user Alfred state that never takes part in a sync
PREFS_PLIST: str = "prefs.plist"


# =============================================================================
# Byte stream utilities
# =============================================================================


def strict_decode(data: bytes) -> str:
    """Decode UTF-8 without replacement characters and without eating a BOM.

    Args:
        data: Bytes to decode

    Returns:
        Decoded string

    Raises:
        UnicodeDecodeError: If data is not valid UTF-8
    """
    return data.decode("utf-8", errors="strict")


def iter_split_bytes_on(data: bytes, value: int) -> Iterator[str]:
    """Yield the decoded sections of data terminated by the byte value.

    Raises:
        ValueError: If bytes remain after the final delimiter
        UnicodeDecodeError: If a section is not valid UTF-8
    """
    start = 0
    while start < len(data):
        end = data.find(bytes([value]), start)
        if end == -1:
            raise ValueError(f"no 0x{value:x} found after index {start}")
        yield strict_decode(data[start:end])
        start = end + 1


def split_bytes_on(data: bytes, value: int) -> list[str]:
    """Split bytes on a terminator byte and decode each section.

    Args:
        data: Bytes, typically the stdout of a ``-z`` git command
        value: Terminator byte value (0 for NUL, 0xA for newline)

    Returns:
        List of decoded sections, in order
    """
    return list(iter_split_bytes_on(data, value))


# =============================================================================
# Collection utilities
# =============================================================================


def unique(values: Iterable[T]) -> list[T]:
    """Drop repeated values, keeping first occurrence order."""
    return list(dict.fromkeys(values))


# =============================================================================
# Shell helpers
# =============================================================================


def sh_quote(value: str) -> str:
    """Quote a string for the shell to enable printing handy commands.

    Single quotes quote everything except themselves, so each embedded single
    quote closes the quoting, adds a double quoted quote, and reopens.

    Args:
        value: String to quote

    Returns:
        Single quoted string
    """
    return "'" + value.replace("'", "'\"'\"'") + "'"


def help_sh_command(
    directory: Union[str, Path],
    command: str,
    extra: Iterable[str] = (),
) -> str:
    """Build a copy and paste friendly shell line that runs an alfredwf command.

    The leading ``:;`` keeps the line harmless if pasted into a shell prompt
    with the prompt characters attached.

    Args:
        directory: Directory to run the command from
        command: alfredwf subcommand name
        extra: Commands to run first, in order

    Returns:
        Shell command line
    """
    steps = [*extra, f"alfredwf {command}"]
    resolved = Path(directory).resolve()
    return f":; ( cd {sh_quote(str(resolved))} && {' && '.join(steps)} ; )"
