import json
import time
from pathlib import Path

import pytest

from doodlebook.cache import FileCache


@pytest.fixture
def temp_cache(tmp_path: Path) -> FileCache:
    """Create a cache in a temporary directory that holds at most 3 files."""
    return FileCache(cache_dir=tmp_path / "cache", max_files=3)


class TestFileCache:
    def test_directory_created_on_first_add(self, temp_cache: FileCache):
        assert not temp_cache.cache_dir.exists()
        assert temp_cache.get("key") is None
        assert len(temp_cache) == 0
        assert not temp_cache.cache_dir.exists()

        temp_cache.add("key", b"data")
        assert temp_cache.cache_dir.is_dir()

    def test_add_and_get(self, temp_cache: FileCache):
        temp_cache.add("a black line drawing of a cat", b"\x89PNG...")
        assert temp_cache.get("a black line drawing of a cat") == b"\x89PNG..."
        assert temp_cache.get("a dog") is None

    def test_exists_and_remove(self, temp_cache: FileCache):
        temp_cache.add("key", b"data")
        assert temp_cache.exists("key")
        assert temp_cache.remove("key") is True
        assert not temp_cache.exists("key")
        assert temp_cache.remove("key") is False

    def test_clear(self, temp_cache: FileCache):
        temp_cache.add("key1", b"data1")
        temp_cache.add("key2", b"data2")
        temp_cache.clear()
        assert len(temp_cache) == 0
        assert temp_cache.keys() == []
        assert not list(temp_cache.cache_dir.glob("*.json"))

    def test_keys(self, temp_cache: FileCache):
        temp_cache.add("key1", b"data1")
        temp_cache.add("key2", b"data2")
        assert sorted(temp_cache.keys()) == ["key1", "key2"]

    def test_oldest_entry_is_evicted(self, temp_cache: FileCache):
        for key in ("key1", "key2", "key3"):
            temp_cache.add(key, b"x")
            time.sleep(0.01)
        temp_cache.add("key4", b"x")
        assert not temp_cache.exists("key1")
        assert all(temp_cache.exists(k) for k in ("key2", "key3", "key4"))

    def test_get_refreshes_lru_position(self, temp_cache: FileCache):
        for key in ("key1", "key2", "key3"):
            temp_cache.add(key, b"x")
            time.sleep(0.01)
        _ = temp_cache.get("key1")
        time.sleep(0.01)
        temp_cache.add("key4", b"x")
        assert temp_cache.exists("key1")
        assert not temp_cache.exists("key2")

    def test_overwrite_does_not_evict(self, temp_cache: FileCache):
        for key in ("key1", "key2", "key3"):
            temp_cache.add(key, b"x")
        temp_cache.add("key3", b"y")
        assert len(temp_cache) == 3
        assert temp_cache.get("key3") == b"y"

    def test_persistence_across_instances(self, tmp_path: Path):
        FileCache(cache_dir=tmp_path).add("persistent", b"data")
        cache = FileCache(cache_dir=tmp_path)
        assert len(cache) == 1
        assert cache.get("persistent") == b"data"

    def test_special_characters_in_keys(self, temp_cache: FileCache):
        for key in ["key with spaces", "key/with/slashes", 'key"with"quotes']:
            temp_cache.add(key, key.encode())
            assert temp_cache.get(key) == key.encode()

    def test_meta_separates_entries(self, tmp_path: Path):
        cache = FileCache(cache_dir=tmp_path, meta={"width": "600"})
        cache.add("prompt", b"600 wide")
        assert cache.get("prompt") == b"600 wide"
        assert cache.get("prompt", {"width": "300"}) is None

        cache.set_meta({"width": "300"})
        assert cache.get("prompt") is None

    def test_meta_stored_in_json(self, tmp_path: Path):
        cache = FileCache(cache_dir=tmp_path, meta={"seed": "42"})
        cache.add("prompt", b"data")
        (entry_file,) = tmp_path.glob("*.json")
        entry = json.loads(entry_file.read_text())
        assert entry["key"] == "prompt"
        assert entry["meta"] == {"seed": "42"}

    def test_corrupt_entry_reads_as_missing(self, temp_cache: FileCache):
        temp_cache.add("key", b"data")
        (entry_file,) = temp_cache.cache_dir.glob("*.json")
        _ = entry_file.write_text("not json")
        assert temp_cache.get("key") is None
