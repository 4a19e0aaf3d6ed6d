"""Atomic file writes backed by the atomicwrites library.

The state file must never be observed half-written: a crash between two
units of an ``apply`` run has to leave the previous, complete state on disk.
"""

from __future__ import annotations

from pathlib import Path

from atomicwrites import atomic_write  # type: ignore[import-untyped]

__all__ = ["atomic_write_bytes", "atomic_write_text"]


def atomic_write_text(
    path: Path | str,
    content: str,
    *,
    encoding: str = "utf-8",
    mkdir: bool = True,
) -> None:
    """Write *content* to *path* via a temporary file and an atomic rename.

    Args:
        path: Destination file.
        content: Text to write.
        encoding: Character encoding. Defaults to "utf-8".
        mkdir: Create missing parent directories first.

    Raises:
        OSError: If the write or the rename fails; the original file is
            left untouched.
    """
    file_path = Path(path)
    if mkdir:
        file_path.parent.mkdir(parents=True, exist_ok=True)

    with atomic_write(str(file_path), mode="w", encoding=encoding, overwrite=True) as f:
        f.write(content)


def atomic_write_bytes(path: Path | str, content: bytes, *, mkdir: bool = True) -> None:
    """Binary counterpart of :func:`atomic_write_text`."""
    file_path = Path(path)
    if mkdir:
        file_path.parent.mkdir(parents=True, exist_ok=True)

    with atomic_write(str(file_path), mode="wb", overwrite=True) as f:
        f.write(content)
