"""Filesystem probe — the existence / classification / read capabilities used by
the resolver and the scanner.

Everything the core needs from the host filesystem goes through a
:class:`PathProbe`, so tests (or a bundler with its own virtual filesystem) can
swap in a different implementation.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class PathProbe(Protocol):
    """Interface that every probe implementation must satisfy."""

    async def exists(self, path: str | Path) -> bool: ...

    def is_dir(self, path: str | Path) -> bool: ...

    async def read_directory(self, path: str | Path) -> list[str]: ...

    async def read_text(self, path: str | Path) -> str: ...


class LocalPathProbe:
    """Probe backed by the local filesystem.

    Blocking calls run in the default thread pool; OSErrors propagate.
    """

    async def exists(self, path: str | Path) -> bool:
        return await asyncio.to_thread(os.path.exists, path)

    def is_dir(self, path: str | Path) -> bool:
        return os.path.isdir(path)

    async def read_directory(self, path: str | Path) -> list[str]:
        return await asyncio.to_thread(os.listdir, path)

    async def read_text(self, path: str | Path) -> str:
        return await asyncio.to_thread(Path(path).read_text, encoding="utf-8")


_default_probe = LocalPathProbe()


def default_probe() -> PathProbe:
    return _default_probe
