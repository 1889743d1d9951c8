from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from urllib.parse import quote

from pydantic import ValidationError

from static_file_cache.schemas import CacheObject

logger = logging.getLogger(__name__)

_SUFFIX = ".json"
_TMP_SUFFIX = ".tmp"
# Most filesystems cap a single path component at 255 bytes.
_MAX_NAME_BYTES = 255
# quote(safe="") never emits "@", so hashed names cannot collide with encoded ones.
_HASHED_PREFIX = "@"


class StaticFileStore:
    """One JSON file per cache object under ``<directory>/<bin>/``.

    Files are meant to be long-lived and reviewable, so objects are written
    with sorted keys and indentation, and an update that only differs in
    ignored keys leaves the file untouched.

    The file name is the percent-encoded cid, or its sha1 when the encoded
    name would not fit in one path component. The real cid is always kept in
    the file body. Data goes through JSON, so it must be JSON-native: tuples
    come back as lists and non-string dict keys come back as strings.
    """

    def __init__(self, bin_name: str, directory: str | Path) -> None:
        self.bin_name = bin_name
        self.directory = Path(directory) / bin_name

    def get_filepath_from_cid(self, cid: str) -> Path:
        if not cid:
            raise ValueError("cid must not be empty")
        name = f"{quote(cid, safe='')}{_SUFFIX}"
        if len(name.encode("utf-8")) + len(_TMP_SUFFIX) > _MAX_NAME_BYTES:
            digest = hashlib.sha1(cid.encode("utf-8")).hexdigest()
            name = f"{_HASHED_PREFIX}{digest}{_SUFFIX}"
        return self.directory / name

    def load(self, cid: str, *, now: int | None = None) -> CacheObject | None:
        return self.load_path(self.get_filepath_from_cid(cid), now=now)

    def load_path(self, path: Path, *, now: int | None = None) -> CacheObject | None:
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("static_file_cache miss path=%s reason=not_found", path)
            return None

        obj = self._parse(raw, path)
        if obj is None:
            return None

        if obj.is_expired(now):
            logger.info("static_file_cache miss path=%s reason=expired", path)
            return None

        logger.info("static_file_cache hit path=%s", path)
        return obj

    def save(self, obj: CacheObject, path: Path | None = None) -> Path:
        target = path or self.get_filepath_from_cid(obj.cid)
        target.parent.mkdir(parents=True, exist_ok=True)

        payload = json.dumps(
            obj.model_dump(mode="json"),
            ensure_ascii=False,
            indent=2,
            sort_keys=True,
        )
        tmp_path = target.with_name(f"{target.name}{_TMP_SUFFIX}")
        try:
            tmp_path.write_text(payload + "\n", encoding="utf-8")
            tmp_path.replace(target)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise

        logger.info("static_file_cache write path=%s expire=%s", target, obj.expire)
        return target

    def delete(self, cid: str) -> bool:
        path = self.get_filepath_from_cid(cid)
        if not path.exists():
            return False
        path.unlink()
        logger.info("static_file_cache delete path=%s", path)
        return True

    def list_cids(self) -> list[str]:
        cids: list[str] = []
        for path in self._iter_files():
            try:
                raw = path.read_text(encoding="utf-8")
            except FileNotFoundError:
                continue
            obj = self._parse(raw, path)
            if obj is not None:
                cids.append(obj.cid)
        return sorted(cids)

    def is_empty(self) -> bool:
        return next(self._iter_files(), None) is None

    @staticmethod
    def is_unchanged(
        existing: CacheObject,
        incoming: CacheObject,
        ignore_keys: Iterable[str],
    ) -> bool:
        ignored = set(ignore_keys)
        old = existing.model_dump(mode="json", exclude=ignored)
        new = incoming.model_dump(mode="json", exclude=ignored)
        return old == new

    @staticmethod
    def _parse(raw: str, path: Path) -> CacheObject | None:
        try:
            return CacheObject.model_validate_json(raw)
        except ValidationError:
            logger.warning("static_file_cache miss path=%s reason=corrupt", path)
            return None

    def _iter_files(self) -> Iterator[Path]:
        if not self.directory.is_dir():
            return iter(())
        return (path for path in self.directory.iterdir() if path.name.endswith(_SUFFIX))
