"""Chunked persistence on top of the host's size-limited plugin data store.

The host only accepts values up to a small per-key size.  Longer values
are split across ``key-1``, ``key-2``, ... and stitched back together on
read.  An unchunked ``key`` is authoritative whenever it exists;
otherwise the contiguous run starting at ``key-1`` is, and the first
missing index ends it.

A crash between chunk writes leaves a truncated run behind.  ``read``
returns the truncated value as-is; detecting truncation is left to
callers that need it.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

from collection_sync.config import settings

logger = logging.getLogger(__name__)

# Orphan cleanup stops after this many consecutive missing indices.
_ORPHAN_SCAN_GAP = 2


class PluginDataStore(Protocol):
    """The subset of the host API that plugin data lives in.

    Setting a key to ``None`` removes it.
    """

    async def get_plugin_data(self, key: str) -> str | None: ...

    async def set_plugin_data(self, key: str, value: str | None) -> None: ...

    async def get_plugin_data_keys(self) -> list[str]: ...


def chunk_key(key: str, index: int) -> str:
    """Return the storage key of the 1-based chunk ``index`` of ``key``."""
    return f"{key}-{index}"


class ChunkedStore:
    """Read and write values of any length through a ``PluginDataStore``.

    Args:
        store: The host plugin data API.
        chunk_size: Maximum characters per stored value. Defaults to
            ``settings.chunk_size``.
    """

    def __init__(self, store: PluginDataStore, chunk_size: int | None = None) -> None:
        resolved = chunk_size if chunk_size is not None else settings.chunk_size
        if resolved <= 0:
            raise ValueError("chunk_size must be a positive integer")
        self._store = store
        self._chunk_size = resolved

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def write(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, chunking it when it is too long.

        Chunks are written strictly in order, each awaited before the
        next, so a reader never sees a gap inside a completed prefix.
        Leftovers from a previous, longer value are removed afterwards.
        """
        if len(value) <= self._chunk_size:
            await self._store.set_plugin_data(key, value)
            await self._remove_orphans(key, start=1)
            return

        chunks = [
            value[i : i + self._chunk_size]
            for i in range(0, len(value), self._chunk_size)
        ]
        for index, chunk in enumerate(chunks, start=1):
            await self._store.set_plugin_data(chunk_key(key, index), chunk)
            logger.debug("Wrote chunk %d/%d of %s", index, len(chunks), key)

        # The unchunked key would shadow the new chunk run.
        await self._store.set_plugin_data(key, None)
        await self._remove_orphans(key, start=len(chunks) + 1)

    async def write_json(self, key: str, value: Any) -> None:
        """Serialize ``value`` as JSON and ``write`` it."""
        await self.write(key, json.dumps(value))

    async def delete(self, key: str) -> None:
        """Remove ``key`` and every chunk stored for it."""
        await self._store.set_plugin_data(key, None)
        await self._remove_orphans(key, start=1)

    async def _remove_orphans(self, key: str, start: int) -> None:
        """Best-effort removal of stale chunks from index ``start`` upwards.

        Scanning stops after ``_ORPHAN_SCAN_GAP`` consecutive missing
        indices.  Failures are logged, not raised.
        """
        try:
            existing = set(await self._store.get_plugin_data_keys())
            index = start
            missing = 0
            while missing < _ORPHAN_SCAN_GAP:
                orphan = chunk_key(key, index)
                if orphan in existing:
                    await self._store.set_plugin_data(orphan, None)
                    logger.debug("Removed orphan chunk %s", orphan)
                    missing = 0
                else:
                    missing += 1
                index += 1
        except Exception as exc:
            logger.warning("Failed to clean up orphan chunks for %s: %s", key, exc)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def read(self, key: str) -> str | None:
        """Return the value stored under ``key``, or ``None`` if absent."""
        keys = set(await self._store.get_plugin_data_keys())
        if key in keys:
            return await self._store.get_plugin_data(key)

        parts: list[str] = []
        index = 1
        while chunk_key(key, index) in keys:
            chunk = await self._store.get_plugin_data(chunk_key(key, index))
            if chunk is None:
                break
            parts.append(chunk)
            index += 1

        if not parts:
            return None
        return "".join(parts)

    async def read_parsed(self, key: str) -> Any:
        """``read`` the value and decode it as JSON when possible.

        A value that is not valid JSON is returned as the raw string, so
        callers must accept either shape.
        """
        raw = await self.read(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return raw
