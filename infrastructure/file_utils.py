"""Async wrappers around blocking file operations.

Each call runs in the default thread pool via `asyncio.to_thread`, so the
event loop only suspends at these boundaries. Errors are raised as the
underlying `OSError`.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
import os
from pathlib import Path

LINE_BATCH_SIZE_HINT = 64 * 1024


async def fs_exists(path: str | Path) -> bool:
    return await asyncio.to_thread(os.path.exists, path)


async def fs_unlink(path: str | Path) -> None:
    await asyncio.to_thread(os.unlink, path)


async def fs_read_file(path: str | Path) -> bytes:
    return await asyncio.to_thread(Path(path).read_bytes)


def _write_text(path: str | Path, text: str) -> None:
    with open(path, "w", encoding="utf-8", newline="\n") as f:
        f.write(text)


async def fs_write_file(path: str | Path, text: str) -> None:
    await asyncio.to_thread(_write_text, path, text)


async def fs_iter_lines(path: str | Path, encoding: str = "utf-8") -> AsyncIterator[str]:
    """Yield the lines of a text file without their line endings.

    Lines are read in batches in a worker thread.
    """
    f = await asyncio.to_thread(open, path, "r", encoding=encoding, errors="replace")
    try:
        while True:
            lines = await asyncio.to_thread(f.readlines, LINE_BATCH_SIZE_HINT)
            if not lines:
                break
            for line in lines:
                yield line.rstrip("\r\n")
    finally:
        await asyncio.to_thread(f.close)
