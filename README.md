# assetrpc

`assetrpc` serves L2 NFT assets over JSON-RPC. Its methods and response shapes follow
the Digital Asset Standard (DAS) API. It has no dependencies outside the standard library.

## Modules

- `assetrpc.l2` holds the asset model. It defines `L2Asset`, which checks key lengths and
  integer ranges when an asset is built. It also defines the storage sorting options
  `AssetSortBy`, `AssetSortDirection` and `AssetSorting`, whose default is newest first.
  `pubkey_to_string` and `pubkey_from_string` encode and decode base58 public keys.
  `pubkey_from_string` returns `None` for anything that is not a valid 32-byte key.
- `assetrpc.api_key` provides `ApiKey`, `Username` and `ApiKeys`. The repr of an `ApiKey`
  hides its value. `ApiKeys.contains_api_key_then_get_username` looks up the owner of a key.
- `assetrpc.dto` holds the DAS document classes.
  - `Asset.from_extended(extended, metadata)` builds a DAS `Asset` from an `AssetExtended`
    and the decoded metadata JSON. It reads the description and attributes into
    `content.metadata`. It reads `image`, `animation_url` and `external_url` into the links.
    It reads `properties.files` into the files, with the image file first. It guesses MIME
    types from the URL path and falls back to `image/png`.
  - `Asset.to_json` and `Asset.from_json` convert documents to and from decoded JSON.
  - `Asset.empty_json()` is `None`, which stands for a missing asset.
  - Helpers: `safe_select`, which is a small JSON-path lookup, `parse_files`,
    `file_from_str`, `to_uri` and `get_mime_type_from_uri`.
- `assetrpc.interfaces` declares the contracts an application implements. They are the
  abstract bases `AssetService`, `L2Storage`, `AssetMetadataStorage`, `BlobStorage`,
  `L1Service` and `Bip44DerivationSequence`. The module also holds the records
  `L2AssetInfo`, `ParsedMintIxInfo` and `DerivationValues`, and the errors `L1MintError`,
  `L1MintTransactionError` and `L2StorageError`.
- `assetrpc.rpc_types` holds the request parameter classes, read from camelCase JSON with
  `from_json`: `GetAsset`, `GetAssetBatch`, `GetAssetsByOwner`, `GetAssetsByCreator` and
  `AssetSorting`. It also holds the `AssetList` response page. Unknown fields are rejected.
- `assetrpc.errors` holds `DasApiError`, `JsonRpcError` and `ErrorCode`.
  `DasApiError.to_rpc_error()` gives the error object that is sent to clients.
- `assetrpc.endpoints` holds the endpoints `health`, `get_asset`, `get_asset_batch`,
  `get_asset_by_owner` and `get_asset_by_creator`. It also holds `AppContext`,
  `MetadataUriCreator`, `verify_limit`, `verify_page` and `encode_cursor`.
- `assetrpc.registrar` holds `RpcMethodRegistrar`, which registers endpoints under their
  function names and supports aliases. `RpcHandler.handle` answers single and batch
  JSON-RPC 2.0 requests, given as text or as decoded JSON. `register_rpc_methods(ctx)`
  builds the complete handler, including the aliases `getAsset`, `getAssetBatch`,
  `getAssetByOwner` and `getAssetByCreator`.

## Installation

```
pip install .
```

## Usage

Provide an `AssetService` implementation. Wrap it in an `AppContext` together with a
`MetadataUriCreator`, then dispatch requests:

```python
import asyncio

from assetrpc.endpoints import AppContext, MetadataUriCreator
from assetrpc.registrar import register_rpc_methods

ctx = AppContext(
    asset_service=my_asset_service,          # your AssetService implementation
    metadata_uri_base=MetadataUriCreator("127.0.0.1:8080"),
)
handler = register_rpc_methods(ctx)

request = {"jsonrpc": "2.0", "id": 1, "method": "getAsset", "params": {"id": "<base58 pubkey>"}}
response = asyncio.run(handler.handle(request))
```

Metadata URIs take the form `<base>/asset/<pubkey>/metadata.json`.

## Pagination

`get_asset_by_owner` and `get_asset_by_creator` choose a pagination mode from the
parameters they are given:

- **Cursor mode.** This applies when none of `before`, `after` or `page` is given. The
  response carries a `cursor` for the last item, and that cursor is passed back as `cursor`.
- **Before/after mode.** This applies when `before` or `after` is given. The response
  carries `before` and `after` cursors for its first and last items.
- **Page mode.** This applies when `page` is given. The page number is echoed back.

A cursor is the URL-safe base64 encoding of the asset's creation time and its key.

### Limits

- `limit` must be below 1000, which is also the default.
- `page` must be below 50.

A value over either bound makes the request fail with a JSON-RPC error whose code is `-32000`.

## What it does not do

- It has no HTTP server and no command. You pass requests to `RpcHandler.handle`
  yourself, from whatever transport you use.
- It has no storage, S3 or chain implementations. `AssetService` and the storage and L1
  interfaces are abstract and must be supplied by the application.
- It has no configuration loading and no logging setup. Modules log through the standard
  `logging` module.

## Tests

```
pip install .[test]
pytest
```