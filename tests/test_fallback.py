from __future__ import annotations

import pytest

from static_file_cache.config import FallbackConfig
from static_file_cache.fallback import build_fallback_cache
from static_file_cache.storage import FileCache, MemoryCache, NullCache


def test_build_fallback_cache_aliases(tmp_path) -> None:
    config = FallbackConfig(directory=str(tmp_path))

    assert isinstance(build_fallback_cache("memory", "page", config), MemoryCache)
    assert isinstance(build_fallback_cache(" NULL ", "page", config), NullCache)

    file_cache = build_fallback_cache("file", "page", config)
    assert isinstance(file_cache, FileCache)
    assert file_cache.directory == tmp_path / "page"


@pytest.mark.parametrize(
    "class_name",
    [
        "static_file_cache.storage.memory:MemoryCache",
        "static_file_cache.storage.memory.MemoryCache",
    ],
)
def test_build_fallback_cache_from_import_path(class_name: str) -> None:
    cache = build_fallback_cache(class_name, "page")

    assert isinstance(cache, MemoryCache)
    assert cache.bin_name == "page"


@pytest.mark.parametrize(
    "class_name",
    ["FakeCache", "missing.module:Cache", "static_file_cache.storage.memory:Nope"],
)
def test_build_fallback_cache_rejects_unknown_class(class_name: str) -> None:
    with pytest.raises(ValueError, match="Unknown fallback cache class"):
        build_fallback_cache(class_name, "page")
