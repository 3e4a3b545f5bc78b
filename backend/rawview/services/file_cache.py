"""
In-memory cache of whole raw volume files.

A volume is read fully into memory on first access and kept until a viewer
session evicts it, the file changes on disk, or the LRU bound pushes it out.
Global extrema are memoised on the cached entry so they are dropped with it.
"""

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from ..core.element_type import ElementType
from ..core.errors import SizeLimitExceededError
from ..core.extrema import DEFAULT_CHUNK_ELEMENTS, Extrema, compute_extrema

logger = logging.getLogger(__name__)


@dataclass
class CachedVolume:
    data: bytes
    mtime: float
    size: int
    extrema: Dict[Tuple[ElementType, bool], Extrema] = field(default_factory=dict)


class FileCache:
    """LRU cache of file contents keyed by resolved path."""

    def __init__(self, max_file_size: int = 1024 * 1024 * 1024,
                 max_items: Optional[int] = None,
                 extrema_chunk_elements: int = DEFAULT_CHUNK_ELEMENTS):
        self.max_file_size = max_file_size
        self.max_items = max_items
        self.extrema_chunk_elements = extrema_chunk_elements
        self._entries: "OrderedDict[str, CachedVolume]" = OrderedDict()
        self._lock = threading.RLock()

    @staticmethod
    def _key(path: Union[str, Path]) -> str:
        return str(Path(path).resolve())

    def _load(self, path: Path) -> CachedVolume:
        stat = path.stat()
        if stat.st_size > self.max_file_size:
            raise SizeLimitExceededError(
                f"File size {stat.st_size} exceeds safe limit of {self.max_file_size} bytes")
        data = path.read_bytes()
        logger.info("Loaded %s into cache (%d bytes)", path, len(data))
        return CachedVolume(data=data, mtime=stat.st_mtime, size=stat.st_size)

    def _get_entry(self, path: Union[str, Path]) -> CachedVolume:
        path = Path(path)
        key = self._key(path)
        # stat first so a missing file raises FileNotFoundError even when cached
        stat = path.stat()
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.mtime == stat.st_mtime and entry.size == stat.st_size:
                self._entries.move_to_end(key)  # mark as recently used
                return entry
        entry = self._load(path)
        with self._lock:
            self._entries[key] = entry
            self._entries.move_to_end(key)
            if self.max_items is not None and len(self._entries) > self.max_items:
                old_key, _ = self._entries.popitem(last=False)  # remove least recently used item
                logger.info("Evicted %s from cache (LRU)", old_key)
        return entry

    def get(self, path: Union[str, Path]) -> bytes:
        """Whole file contents; reads from disk on a miss or when the file changed."""
        return self._get_entry(path).data

    def get_extrema(self, path: Union[str, Path], data_type: Union[ElementType, str],
                    little_endian: bool = True) -> Extrema:
        """Global min/max of the cached buffer, computed once per type and byte order."""
        etype = ElementType.parse(data_type)
        entry = self._get_entry(path)
        memo_key = (etype, bool(little_endian) or etype.bytes_per_pixel == 1)
        with self._lock:
            extrema = entry.extrema.get(memo_key)
        if extrema is None:
            extrema = compute_extrema(entry.data, etype, little_endian,
                                      chunk_size=self.extrema_chunk_elements)
            with self._lock:
                entry.extrema[memo_key] = extrema
            logger.debug("Computed extrema for %s as %s: %s", path, etype.value, extrema)
        return extrema

    def evict(self, path: Union[str, Path]) -> bool:
        with self._lock:
            removed = self._entries.pop(self._key(path), None) is not None
        if removed:
            logger.info("Evicted %s from cache", path)
        return removed

    def clear(self):
        with self._lock:
            self._entries.clear()

    def is_cached(self, path: Union[str, Path]) -> bool:
        with self._lock:
            return self._key(path) in self._entries

    def reload(self, path: Union[str, Path]) -> bytes:
        self.evict(path)
        return self.get(path)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["CachedVolume", "FileCache"]
