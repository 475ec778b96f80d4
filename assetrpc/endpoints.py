"""DAS JSON-RPC endpoints serving L2 assets."""

from __future__ import annotations

import base64
import datetime as _dt
from dataclasses import dataclass
from typing import Any

from assetrpc.dto import Asset, AssetExtended
from assetrpc.errors import DasApiError
from assetrpc.interfaces import AssetService, L2AssetInfo
from assetrpc.l2 import AssetSorting, pubkey_from_string, pubkey_to_string
from assetrpc.rpc_types import (
    AssetList,
    GetAsset,
    GetAssetBatch,
    GetAssetsByCreator,
    GetAssetsByOwner,
)

DEFAULT_LIMIT_FOR_PAGE = 1000
DEFAULT_MAX_PAGE_LIMIT = 50


@dataclass(frozen=True)
class MetadataUriCreator:
    """Builds metadata URIs under a base address."""

    base: str

    def metadata_uri_for_key(self, public_key: str) -> str:
        return f"{self.base}/asset/{public_key}/metadata.json"


@dataclass
class AppContext:
    """What the endpoints need: the asset service and the metadata URI base."""

    asset_service: AssetService
    metadata_uri_base: MetadataUriCreator


def encode_cursor(timestamp: _dt.datetime, pubkey: bytes) -> str:
    """Encode an asset's creation time and key as a pagination cursor."""
    raw = f"{timestamp.isoformat()},{pubkey_to_string(pubkey)}"
    return base64.urlsafe_b64encode(raw.encode()).decode()


def verify_limit(limit: int | None) -> int:
    """Return the page size, defaulting to the maximum; raise if it is too big."""
    if limit is None:
        return DEFAULT_LIMIT_FOR_PAGE
    if limit < DEFAULT_LIMIT_FOR_PAGE:
        return limit
    raise DasApiError.limit_too_big(DEFAULT_LIMIT_FOR_PAGE).to_rpc_error()


def verify_page(page: int | None) -> int | None:
    """Return the page number; raise if it is too big."""
    if page is None or page < DEFAULT_MAX_PAGE_LIMIT:
        return page
    raise DasApiError.page_too_big(DEFAULT_MAX_PAGE_LIMIT).to_rpc_error()


def _build(info: L2AssetInfo, key: str, ctx: AppContext) -> Asset:
    extended = AssetExtended(asset=info.asset, metadata_uri=ctx.metadata_uri_base.metadata_uri_for_key(key))
    return Asset.from_extended(extended, info.metadata)


async def health() -> str:
    return "Server is ok"


async def get_asset(params: GetAsset, ctx: AppContext) -> Any:
    pubkey = pubkey_from_string(params.id)
    if pubkey is None:
        raise DasApiError.pubkey_validation(params.id).to_rpc_error()
    try:
        info = await ctx.asset_service.fetch_asset(pubkey)
    except Exception as exc:
        raise DasApiError.database().to_rpc_error() from exc
    if info is None:
        raise DasApiError.no_data_found().to_rpc_error()
    return _build(info, params.id, ctx).to_json()


async def get_asset_batch(params: GetAssetBatch, ctx: AppContext) -> list:
    keys = []
    for key in params.ids:
        pubkey = pubkey_from_string(key)
        if pubkey is None:
            raise DasApiError.pubkey_validation(key).to_rpc_error()
        keys.append(pubkey)
    try:
        infos = await ctx.asset_service.fetch_assets(keys)
    except Exception as exc:
        raise DasApiError.database().to_rpc_error() from exc
    by_key = {pubkey_to_string(info.asset.pubkey): info for info in infos}
    return [
        _build(by_key[key], key, ctx).to_json() if key in by_key else Asset.empty_json()
        for key in params.ids
    ]


def _paging(params: GetAssetsByOwner | GetAssetsByCreator):
    sorting = params.sort_by.to_l2() if params.sort_by is not None else AssetSorting()
    limit = verify_limit(params.limit)
    page = verify_page(params.page)
    cursor_enabled = params.before is None and params.after is None and page is None
    after = params.cursor if cursor_enabled else params.after
    return sorting, limit, page, cursor_enabled, after


async def get_asset_by_owner(params: GetAssetsByOwner, ctx: AppContext) -> dict:
    sorting, limit, page, cursor_enabled, after = _paging(params)
    try:
        infos = await ctx.asset_service.fetch_assets_by_owner(
            params.owner_address, sorting, limit, params.before, after
        )
    except Exception as exc:
        raise DasApiError.database().to_rpc_error() from exc
    return _prepare_response(infos, cursor_enabled, page, ctx, limit).to_json()


async def get_asset_by_creator(params: GetAssetsByCreator, ctx: AppContext) -> dict:
    sorting, limit, page, cursor_enabled, after = _paging(params)
    try:
        infos = await ctx.asset_service.fetch_assets_by_creator(
            params.creator_address, sorting, limit, params.before, after
        )
    except Exception as exc:
        raise DasApiError.database().to_rpc_error() from exc
    return _prepare_response(infos, cursor_enabled, page, ctx, limit).to_json()


def _cursor_of(info: L2AssetInfo) -> str:
    return encode_cursor(info.asset.create_timestamp, info.asset.pubkey)


def _prepare_response(
    infos: list[L2AssetInfo], cursor_enabled: bool, page: int | None, ctx: AppContext, limit: int
) -> AssetList:
    before = after = cursor = None
    if cursor_enabled:
        cursor = _cursor_of(infos[-1]) if infos else None
    elif page is None and infos:
        before, after = _cursor_of(infos[0]), _cursor_of(infos[-1])
    items = [_build(info, pubkey_to_string(info.asset.pubkey), ctx) for info in infos]
    return AssetList(
        total=len(items),
        limit=limit,
        page=page,
        before=before,
        after=after,
        items=items,
        cursor=cursor,
    )