"""Request parameters and responses of the DAS JSON-RPC methods."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from assetrpc import l2
from assetrpc.dto import Asset

_U32_MAX = 0xFFFFFFFF


def _object(value: Any, name: str, allowed: set[str]) -> dict:
    if not isinstance(value, dict):
        raise ValueError(f"{name} must be a JSON object, got {value!r}")
    unknown = set(value) - allowed
    if unknown:
        raise ValueError(f"unknown field(s) {sorted(unknown)} in {name}")
    return value


def _required(obj: dict, key: str) -> Any:
    if key not in obj:
        raise ValueError(f"missing field {key!r}")
    return obj[key]


def _str(value: Any, key: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{key!r} must be a string, got {value!r}")
    return value


def _opt_str(obj: dict, key: str) -> str | None:
    value = obj.get(key)
    return None if value is None else _str(value, key)


def _u32(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= _U32_MAX:
        raise ValueError(f"{key!r} must be an unsigned 32-bit integer, got {value!r}")
    return value


def _opt_u32(obj: dict, key: str) -> int | None:
    value = obj.get(key)
    return None if value is None else _u32(value, key)


def _opt_bool(obj: dict, key: str) -> bool | None:
    value = obj.get(key)
    if value is None:
        return None
    if not isinstance(value, bool):
        raise ValueError(f"{key!r} must be a boolean, got {value!r}")
    return value


@dataclass(frozen=True)
class GetAsset:
    """Parameters of getAsset."""

    id: str

    @classmethod
    def from_json(cls, value: Any) -> GetAsset:
        obj = _object(value, "GetAsset", {"id"})
        return cls(_str(_required(obj, "id"), "id"))


@dataclass(frozen=True)
class GetAssetBatch:
    """Parameters of getAssetBatch."""

    ids: list[str]

    @classmethod
    def from_json(cls, value: Any) -> GetAssetBatch:
        obj = _object(value, "GetAssetBatch", {"ids"})
        ids = _required(obj, "ids")
        if not isinstance(ids, list):
            raise ValueError(f"'ids' must be an array, got {ids!r}")
        return cls([_str(item, "ids") for item in ids])


class AssetSortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class AssetSortBy(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    NONE = "none"


@dataclass(frozen=True)
class AssetSorting:
    """Sorting requested by a client."""

    sort_by: AssetSortBy = AssetSortBy.CREATED
    sort_direction: AssetSortDirection | None = None

    def to_l2(self) -> l2.AssetSorting:
        """Return the storage sorting; 'none' sorts by creation, direction defaults to descending."""
        sort_by = l2.AssetSortBy.UPDATED if self.sort_by is AssetSortBy.UPDATED else l2.AssetSortBy.CREATED
        direction = (
            l2.AssetSortDirection.ASC
            if self.sort_direction is AssetSortDirection.ASC
            else l2.AssetSortDirection.DESC
        )
        return l2.AssetSorting(sort_by, direction)

    @classmethod
    def from_json(cls, value: Any) -> AssetSorting:
        obj = _object(value, "AssetSorting", {"sortBy", "sortDirection"})
        sort_by = AssetSortBy(_required(obj, "sortBy"))
        raw = obj.get("sortDirection")
        return cls(sort_by, None if raw is None else AssetSortDirection(raw))


def _opt_sorting(obj: dict) -> AssetSorting | None:
    value = obj.get("sortBy")
    return None if value is None else AssetSorting.from_json(value)


_PAGING = {"sortBy", "limit", "page", "before", "after", "cursor"}


@dataclass(frozen=True)
class GetAssetsByOwner:
    """Parameters of getAssetsByOwner."""

    owner_address: str
    sort_by: AssetSorting | None = None
    limit: int | None = None
    page: int | None = None
    before: str | None = None
    after: str | None = None
    cursor: str | None = None

    @classmethod
    def from_json(cls, value: Any) -> GetAssetsByOwner:
        obj = _object(value, "GetAssetsByOwner", _PAGING | {"ownerAddress"})
        return cls(
            owner_address=_str(_required(obj, "ownerAddress"), "ownerAddress"),
            sort_by=_opt_sorting(obj),
            limit=_opt_u32(obj, "limit"),
            page=_opt_u32(obj, "page"),
            before=_opt_str(obj, "before"),
            after=_opt_str(obj, "after"),
            cursor=_opt_str(obj, "cursor"),
        )


@dataclass(frozen=True)
class GetAssetsByCreator:
    """Parameters of getAssetsByCreator."""

    creator_address: str
    only_verified: bool | None = None
    sort_by: AssetSorting | None = None
    limit: int | None = None
    page: int | None = None
    before: str | None = None
    after: str | None = None
    cursor: str | None = None

    @classmethod
    def from_json(cls, value: Any) -> GetAssetsByCreator:
        obj = _object(value, "GetAssetsByCreator", _PAGING | {"creatorAddress", "onlyVerified"})
        return cls(
            creator_address=_str(_required(obj, "creatorAddress"), "creatorAddress"),
            only_verified=_opt_bool(obj, "onlyVerified"),
            sort_by=_opt_sorting(obj),
            limit=_opt_u32(obj, "limit"),
            page=_opt_u32(obj, "page"),
            before=_opt_str(obj, "before"),
            after=_opt_str(obj, "after"),
            cursor=_opt_str(obj, "cursor"),
        )


@dataclass
class AssetList:
    """A page of assets."""

    total: int = 0
    limit: int = 0
    page: int | None = None
    before: str | None = None
    after: str | None = None
    items: list[Asset] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    cursor: str | None = None

    def to_json(self) -> dict:
        out: dict[str, Any] = {"total": self.total, "limit": self.limit}
        for key in ("page", "before", "after"):
            if getattr(self, key) is not None:
                out[key] = getattr(self, key)
        out["items"] = [item.to_json() for item in self.items]
        if self.errors:
            out["errors"] = list(self.errors)
        if self.cursor is not None:
            out["cursor"] = self.cursor
        return out

    @classmethod
    def from_json(cls, value: Any) -> AssetList:
        allowed = {"total", "limit", "page", "before", "after", "items", "errors", "cursor"}
        obj = _object(value, "AssetList", allowed)
        items = obj.get("items", [])
        errors = obj.get("errors", [])
        if not isinstance(items, list) or not isinstance(errors, list):
            raise ValueError("'items' and 'errors' must be arrays")
        return cls(
            total=_u32(obj.get("total", 0), "total"),
            limit=_u32(obj.get("limit", 0), "limit"),
            page=_opt_u32(obj, "page"),
            before=_opt_str(obj, "before"),
            after=_opt_str(obj, "after"),
            items=[Asset.from_json(item) for item in items],
            errors=[_str(e, "errors") for e in errors],
            cursor=_opt_str(obj, "cursor"),
        )