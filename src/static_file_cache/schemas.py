from __future__ import annotations

import time
from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def now_timestamp() -> int:
    return int(time.time())


class DTOBase(BaseModel):
    model_config = ConfigDict(extra="forbid")


class Expire(IntEnum):
    PERMANENT = 0
    TEMPORARY = -1


class CacheObject(DTOBase):
    cid: str
    data: Any = None
    created: int = Field(default_factory=now_timestamp)
    expire: int = int(Expire.PERMANENT)

    @field_validator("expire", mode="before")
    @classmethod
    def normalize_expire(cls, value: object) -> int:
        if value is None:
            return int(Expire.PERMANENT)
        try:
            numeric = int(value)  # type: ignore[call-overload]
        except (TypeError, ValueError) as exc:
            raise ValueError(f"expire must be an integer: {value!r}") from exc
        if numeric < Expire.TEMPORARY:
            return int(Expire.TEMPORARY)
        return numeric

    def is_expired(self, now: int | None = None) -> bool:
        if self.expire <= Expire.PERMANENT:
            return False
        current = now_timestamp() if now is None else now
        return current > self.expire

    def is_temporary(self) -> bool:
        return self.expire == Expire.TEMPORARY


def full_cid(bin_name: str, cid: str) -> str:
    return f"{bin_name}-{cid}"
