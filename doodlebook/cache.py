import base64
import hashlib
import json
import os
import time
from logging import getLogger
from pathlib import Path

logger = getLogger(__name__)


class FileCache:
    """Disk cache for generated images, keyed by prompt text.

    Each entry is a JSON file named by the MD5 of key + metadata, holding the
    base64 data. The least recently used entry is evicted once `max_files`
    is reached; file mtimes record access time across runs.
    """

    def __init__(
        self,
        cache_dir: Path | str | None = None,
        max_files: int = 100,
        meta: dict[str, str] | None = None,
    ):
        if cache_dir is None:
            cache_dir = Path.home() / ".cache" / "doodlebook"
        self.cache_dir: Path = Path(cache_dir)
        self.max_files: int = max_files
        self.meta: dict[str, str] = meta or {}
        self._access_times: dict[str, float] = {
            p.stem: p.stat().st_mtime for p in self.cache_dir.glob("*.json")
        }

    def set_meta(self, meta: dict[str, str]):
        self.meta = meta

    def _safe_key(self, key: str, meta: dict[str, str] | None = None) -> str:
        merged = {**self.meta, **(meta or {})}
        if merged:
            meta_str = "&".join(f"{k}={v}" for k, v in sorted(merged.items()))
            key = f"{key}|meta:{meta_str}"
        return hashlib.md5(key.encode()).hexdigest()

    def _path(self, safe_key: str) -> Path:
        return self.cache_dir / f"{safe_key}.json"

    def _touch(self, safe_key: str):
        now = time.time()
        self._access_times[safe_key] = now
        os.utime(self._path(safe_key), (now, now))

    def _evict(self):
        while self._access_times and len(self._access_times) >= self.max_files:
            oldest = min(self._access_times, key=self._access_times.__getitem__)
            logger.debug(f"Evicting {oldest} from {self.cache_dir}")
            self._path(oldest).unlink(missing_ok=True)
            del self._access_times[oldest]

    def _read(self, safe_key: str) -> dict[str, str] | None:
        try:
            return json.loads(self._path(safe_key).read_text())
        except (OSError, json.JSONDecodeError):
            return None

    def add(self, key: str, data: bytes, meta: dict[str, str] | None = None) -> None:
        safe_key = self._safe_key(key, meta)
        if safe_key not in self._access_times:
            self._evict()
        self.cache_dir.mkdir(exist_ok=True, parents=True)
        entry = {"key": key, "data": base64.b64encode(data).decode("ascii")}
        merged = {**self.meta, **(meta or {})}
        if merged:
            entry["meta"] = merged
        _ = self._path(safe_key).write_text(json.dumps(entry))
        self._touch(safe_key)

    def get(self, key: str, meta: dict[str, str] | None = None) -> bytes | None:
        safe_key = self._safe_key(key, meta)
        if not self._path(safe_key).exists():
            return None
        self._touch(safe_key)
        entry = self._read(safe_key)
        try:
            return base64.b64decode(entry["data"]) if entry else None
        except (KeyError, ValueError):
            return None

    def exists(self, key: str, meta: dict[str, str] | None = None) -> bool:
        return self._path(self._safe_key(key, meta)).exists()

    def remove(self, key: str, meta: dict[str, str] | None = None) -> bool:
        """Remove an entry. Returns False if it was not cached."""
        safe_key = self._safe_key(key, meta)
        path = self._path(safe_key)
        if not path.exists():
            return False
        path.unlink()
        _ = self._access_times.pop(safe_key, None)
        return True

    def clear(self) -> None:
        for path in self.cache_dir.glob("*.json"):
            path.unlink()
        self._access_times.clear()

    def keys(self) -> list[str]:
        entries = (self._read(k) for k in self._access_times)
        return [e["key"] for e in entries if e and "key" in e]

    def __len__(self) -> int:
        return len(self._access_times)
