"""Vault file access that tolerates cloud-sync hiccups.

A note in a OneDrive, Dropbox or iCloud folder that is not materialised
locally can fail its first access with EIO. Every reader and writer here
retries that one errno with exponential backoff; any other OSError is raised
on the spot.
"""

from __future__ import annotations

import asyncio
import contextlib
import errno
import logging
import tempfile
from collections.abc import Awaitable
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _is_transient(error: OSError) -> bool:
    # write_atomic wraps the real error, so look through one level of cause
    cause = error.__cause__ if isinstance(error.__cause__, OSError) else error
    return cause.errno == errno.EIO


async def _retry_eio(
    operation: Callable[[], Awaitable[T]],
    path: Path,
    action: str,
    max_retries: int,
    initial_delay: float,
) -> T:
    delay = initial_delay
    attempt = 1
    while True:
        try:
            return await operation()
        except OSError as e:
            if attempt >= max_retries or not _is_transient(e):
                raise
            if attempt == 1:
                logger.warning(
                    f"Transient I/O error while {action} {path}; retrying "
                    "(the vault may be in a cloud-synced folder)"
                )
            await asyncio.sleep(delay)
            delay *= 2
            attempt += 1


async def read_with_retry(
    path: Path,
    max_retries: int = 3,
    initial_delay: float = 0.1,
) -> str:
    """Return the UTF-8 text of ``path``.

    Raises:
        FileNotFoundError: If the file is missing (never retried).
        OSError: If EIO persists for ``max_retries`` attempts.
    """

    async def read() -> str:
        return path.read_text(encoding="utf-8")

    return await _retry_eio(read, path, "reading", max_retries, initial_delay)


async def read_bytes_with_retry(
    path: Path,
    max_retries: int = 3,
    initial_delay: float = 0.1,
) -> bytes:
    """Return the raw bytes of ``path``, reading in a worker thread."""

    async def read() -> bytes:
        return await asyncio.to_thread(path.read_bytes)

    return await _retry_eio(read, path, "reading", max_retries, initial_delay)


async def write_with_retry(
    path: Path,
    content: str,
    max_retries: int = 3,
    initial_delay: float = 0.1,
) -> None:
    """Replace ``path`` with ``content`` through ``write_atomic``."""

    async def write() -> None:
        write_atomic(path, content)

    await _retry_eio(write, path, "writing", max_retries, initial_delay)


def write_atomic(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Write through a sibling temp file that replaces ``path`` in one step.

    Readers see either the previous content or the new content.

    Raises:
        OSError: Wrapping whatever failed; the temp file is removed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding=encoding,
            dir=path.parent,
            prefix=f".{path.stem}_",
            suffix=".tmp",
            delete=False,
        ) as tmp_file:
            temp_path = Path(tmp_file.name)
            tmp_file.write(content)
        temp_path.replace(path)
    except Exception as e:
        if temp_path is not None:
            with contextlib.suppress(OSError):
                temp_path.unlink()
        raise OSError(f"Failed to write atomically to {path}: {e}") from e
