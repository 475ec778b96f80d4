import datetime as dt

import pytest

from assetrpc.endpoints import AppContext, MetadataUriCreator, get_asset
from assetrpc.errors import DasApiError, JsonRpcError
from assetrpc.interfaces import AssetService, L2AssetInfo
from assetrpc.l2 import L2Asset, pubkey_to_string
from assetrpc.registrar import RpcMethodRegistrar, endpoint_name, register_rpc_methods

BASE = "127.0.0.1:8080"
TS = dt.datetime(2015, 2, 18, 23, 16, 9)


def _asset(seed, name, owner="owner1", creator="creator1"):
    return L2Asset(
        pubkey=bytes([seed]) * 32,
        name=name,
        owner=owner,
        creator=creator,
        collection=None,
        authority="authority1",
        royalty_basis_points=0,
        create_timestamp=TS,
        update_timestamp=TS,
        bip44_account_num=1,
        bip44_address_num=1,
    )


class MemoryAssetService(AssetService):
    def __init__(self, assets=()):
        self.infos = {a.pubkey: L2AssetInfo(asset=a) for a in assets}
        self.minted = []

    async def create_asset(self, metadata_json, owner, creator, authority, name, royalty_basis_points, collection):
        asset = _asset(len(self.infos) + 1, name, owner, creator)
        info = L2AssetInfo(asset=asset, metadata=metadata_json)
        self.infos[asset.pubkey] = info
        return info

    async def update_asset(self, asset_pubkey, metadata_json, owner, creator, authority, name, collection=...):
        info = self.infos.get(asset_pubkey)
        if info is not None and name is not None:
            info.asset.name = name
        return info

    async def fetch_asset(self, asset_pubkey):
        return self.infos.get(asset_pubkey)

    async def fetch_assets(self, asset_pubkeys):
        return [self.infos[k] for k in asset_pubkeys if k in self.infos]

    async def fetch_metadata(self, asset_pubkey):
        info = self.infos.get(asset_pubkey)
        return None if info is None else info.metadata

    async def fetch_assets_by_owner(self, owner_pubkey, sorting, limit, before, after):
        return [i for i in self.infos.values() if i.asset.owner == owner_pubkey][:limit]

    async def fetch_assets_by_creator(self, creator_pubkey, sorting, limit, before, after):
        return [i for i in self.infos.values() if i.asset.creator == creator_pubkey][:limit]

    async def get_mint_status(self, public_key):
        return ("l2", None)

    async def execute_asset_l1_mint(self, tx, exec_sync):
        self.minted.append(tx)


class BrokenAssetService(MemoryAssetService):
    async def fetch_asset(self, asset_pubkey):
        raise RuntimeError("storage is down")


@pytest.fixture
def stored():
    return [_asset(1, "first"), _asset(2, "second")]


@pytest.fixture
def handler(stored):
    ctx = AppContext(asset_service=MemoryAssetService(stored), metadata_uri_base=MetadataUriCreator(BASE))
    return register_rpc_methods(ctx)


def _call(method, params=None, call_id=1):
    call = {"jsonrpc": "2.0", "method": method, "id": call_id}
    if params is not None:
        call["params"] = params
    return call


def test_extraction_of_endpoint_name():
    assert endpoint_name(get_asset) == "get_asset"


def test_endpoint_name_of_lambda_fails():
    with pytest.raises(ValueError):
        endpoint_name(lambda: None)


def test_registered_names_and_aliases(handler):
    assert "get_asset_by_creator" in handler
    assert "getAssetBatch" in handler
    assert "getAssetsByOwner" not in handler


@pytest.mark.asyncio
async def test_health(handler):
    response = await handler.handle(_call("health", call_id=7))
    assert response == {"jsonrpc": "2.0", "result": "Server is ok", "id": 7}


@pytest.mark.asyncio
async def test_health_accepts_empty_params(handler):
    response = await handler.handle(_call("health", []))
    assert response["result"] == "Server is ok"


@pytest.mark.asyncio
async def test_health_rejects_params(handler):
    response = await handler.handle(_call("health", [1]))
    assert response["error"]["code"] == -32602


@pytest.mark.asyncio
async def test_get_asset_through_alias(handler, stored):
    key = pubkey_to_string(stored[0].pubkey)
    response = await handler.handle(_call("getAsset", {"id": key}))
    assert response["result"]["id"] == key
    assert response["result"]["content"]["json_uri"] == f"{BASE}/asset/{key}/metadata.json"
    assert response["result"]["content"]["metadata"]["name"] == "first"


@pytest.mark.asyncio
async def test_get_asset_by_registered_name(handler, stored):
    key = pubkey_to_string(stored[1].pubkey)
    response = await handler.handle(_call("get_asset", {"id": key}))
    assert response["result"]["id"] == key


@pytest.mark.asyncio
async def test_get_asset_with_invalid_pubkey(handler):
    bad_key = "Something that is not a public key."
    response = await handler.handle(_call("getAsset", {"id": bad_key}))
    assert response["error"] == DasApiError.pubkey_validation(bad_key).to_rpc_error().to_json()


@pytest.mark.asyncio
async def test_get_asset_not_found(handler):
    key = pubkey_to_string(bytes([9]) * 32)
    response = await handler.handle(_call("getAsset", {"id": key}))
    assert response["error"] == DasApiError.no_data_found().to_rpc_error().to_json()


@pytest.mark.asyncio
async def test_get_asset_unknown_field_is_invalid_params(handler, stored):
    key = pubkey_to_string(stored[0].pubkey)
    response = await handler.handle(_call("getAsset", {"id": key, "extra": 1}))
    assert response["error"]["code"] == -32602


@pytest.mark.asyncio
async def test_get_asset_without_params_is_invalid_params(handler):
    response = await handler.handle(_call("getAsset"))
    assert response["error"]["code"] == -32602


@pytest.mark.asyncio
async def test_asset_batch_with_missing_key(handler, stored):
    present = pubkey_to_string(stored[0].pubkey)
    missing = pubkey_to_string(bytes([9]) * 32)
    response = await handler.handle(_call("getAssetBatch", {"ids": [present, missing]}))
    result = response["result"]
    assert result[0]["id"] == present
    assert result[1] is None


@pytest.mark.asyncio
async def test_assets_by_owner_through_alias(handler):
    response = await handler.handle(_call("getAssetByOwner", {"ownerAddress": "owner1"}))
    result = response["result"]
    assert result["total"] == 2
    assert result["limit"] == 1000
    assert [item["content"]["metadata"]["name"] for item in result["items"]] == ["first", "second"]


@pytest.mark.asyncio
async def test_assets_by_creator_limit_too_big(handler):
    response = await handler.handle(_call("getAssetByCreator", {"creatorAddress": "creator1", "limit": 1001}))
    assert response["error"] == DasApiError.limit_too_big(1000).to_rpc_error().to_json()


@pytest.mark.asyncio
async def test_method_not_found(handler):
    response = await handler.handle(_call("getNothing"))
    assert response["error"] == JsonRpcError.method_not_found().to_json()


@pytest.mark.asyncio
async def test_notification_has_no_response(handler):
    response = await handler.handle({"jsonrpc": "2.0", "method": "health"})
    assert response is None


@pytest.mark.asyncio
async def test_batch_request(handler):
    responses = await handler.handle([_call("health", call_id=1), _call("nothing", call_id=2)])
    assert responses[0]["result"] == "Server is ok"
    assert responses[1]["error"]["code"] == -32601
    assert [r["id"] for r in responses] == [1, 2]


@pytest.mark.asyncio
async def test_empty_batch_is_invalid_request(handler):
    response = await handler.handle([])
    assert response["error"]["code"] == -32600
    assert response["id"] is None


@pytest.mark.asyncio
async def test_text_request_and_parse_error(handler):
    ok = await handler.handle('{"jsonrpc": "2.0", "method": "health", "id": "a"}')
    assert ok == {"jsonrpc": "2.0", "result": "Server is ok", "id": "a"}
    broken = await handler.handle("{not json")
    assert broken["error"]["code"] == -32700
    assert broken["id"] is None


@pytest.mark.asyncio
async def test_wrong_version_is_invalid_request(handler):
    response = await handler.handle({"jsonrpc": "1.5", "method": "health", "id": 1})
    assert response["error"]["code"] == -32600


@pytest.mark.asyncio
async def test_method_without_params_receives_context():
    async def count_items(ctx):
        return ctx["count"]

    handler = RpcMethodRegistrar({"count": 3}).method_without_params(count_items).finish()
    response = await handler.handle(_call("count_items"))
    assert response["result"] == 3
    rejected = await handler.handle(_call("count_items", {"a": 1}))
    assert rejected["error"]["code"] == -32602


@pytest.mark.asyncio
async def test_alias_for_missing_method():
    handler = RpcMethodRegistrar(None).add_alias("getGhost", "ghost").finish()
    response = await handler.handle(_call("getGhost"))
    assert response["error"]["code"] == -32601


@pytest.mark.asyncio
async def test_storage_failure_is_internal_error(stored):
    ctx = AppContext(asset_service=BrokenAssetService(stored), metadata_uri_base=MetadataUriCreator(BASE))
    handler = register_rpc_methods(ctx)
    key = pubkey_to_string(stored[0].pubkey)
    response = await handler.handle(_call("getAsset", {"id": key}))
    assert response["error"] == JsonRpcError.internal_error().to_json()


@pytest.mark.asyncio
async def test_unexpected_exception_is_internal_error():
    async def explode():
        raise RuntimeError("boom")

    handler = RpcMethodRegistrar(None).method_without_ctx_and_params(explode).finish()
    response = await handler.handle(_call("explode"))
    assert response["error"]["code"] == -32603