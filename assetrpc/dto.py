"""DAS asset documents built from L2 assets and their NFT metadata."""

from __future__ import annotations

import copy
import json
import logging
import mimetypes
import re
from collections.abc import Callable, Iterator
from dataclasses import MISSING, dataclass, field, fields
from enum import Enum
from typing import Any, NamedTuple
from urllib.parse import SplitResult, urlsplit

from assetrpc.l2 import L2Asset, pubkey_to_string

logger = logging.getLogger(__name__)

COLLECTION_GROUP_KEY = "collection"
DEFAULT_MIME_TYPE = "image/png"
CONTENT_SCHEMA = "https://schema.metaplex.com/nft1.0.json"
EMPTY_ASSET_JSON: Any = json.loads("null")

_LINK_FIELDS = ("image", "animation_url", "external_url")
_MIME_TYPES = mimetypes.MimeTypes()
_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")
_HOST_SCHEMES = frozenset({"http", "https", "ws", "wss", "ftp"})
_ABSENT = object()


# --- JSON codecs -----------------------------------------------------------


class _Codec(NamedTuple):
    dump: Callable[[Any], Any]
    load: Callable[[Any], Any]


def _typed(name: str, check: Callable[[Any], bool]) -> _Codec:
    def load(value: Any) -> Any:
        if not check(value):
            raise ValueError(f"expected {name}, got {value!r}")
        return value

    return _Codec(lambda value: value, load)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _load_float(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"expected a number, got {value!r}")
    return float(value)


_STR = _typed("a string", lambda v: isinstance(v, str))
_BOOL = _typed("a boolean", lambda v: isinstance(v, bool))
_INT = _typed("an integer", _is_int)
_UINT = _typed("a non-negative integer", lambda v: _is_int(v) and v >= 0)
_FLOAT = _Codec(float, _load_float)
_ANY = _Codec(copy.deepcopy, copy.deepcopy)


def _enum(enum_type: type[Enum]) -> _Codec:
    return _Codec(lambda member: member.value, enum_type)


def _object(cls: Any) -> _Codec:
    return _Codec(lambda obj: obj._to_json(), cls._from_json)


def _list(item: _Codec) -> _Codec:
    def load(value: Any) -> list:
        if not isinstance(value, list):
            raise ValueError(f"expected a JSON array, got {value!r}")
        return [item.load(element) for element in value]

    return _Codec(lambda values: [item.dump(v) for v in values], load)


def _mapping(item: _Codec) -> _Codec:
    def load(value: Any) -> dict:
        if not isinstance(value, dict):
            raise ValueError(f"expected a JSON object, got {value!r}")
        return {key: item.load(v) for key, v in value.items()}

    return _Codec(lambda values: {k: item.dump(v) for k, v in values.items()}, load)


def _req(codec: _Codec, *, key: str | None = None, default: Any = MISSING) -> Any:
    meta = {"codec": codec, "key": key, "optional": False, "skip_none": False}
    return field(default=default, metadata=meta)


def _opt(codec: _Codec, *, key: str | None = None, skip: bool = False) -> Any:
    meta = {"codec": codec, "key": key, "optional": True, "skip_none": skip}
    return field(default=None, metadata=meta)


class _JsonObject:
    """Serialisation of dataclass fields described by _req and _opt."""

    def _to_json(self) -> dict:
        out: dict[str, Any] = {}
        for spec in fields(self):  # type: ignore[arg-type]
            meta = spec.metadata
            key = meta["key"] or spec.name
            value = getattr(self, spec.name)
            if value is None:
                if not meta["skip_none"]:
                    out[key] = None
            else:
                out[key] = meta["codec"].dump(value)
        return out

    @classmethod
    def _from_json(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            raise ValueError(f"{cls.__name__} must be a JSON object, got {value!r}")
        kwargs: dict[str, Any] = {}
        for spec in fields(cls):  # type: ignore[arg-type]
            meta = spec.metadata
            key = meta["key"] or spec.name
            raw = value.get(key)
            if raw is None:
                if meta["optional"]:
                    kwargs[spec.name] = None
                    continue
                raise ValueError(f"missing or null field {key!r} in {cls.__name__}")
            kwargs[spec.name] = meta["codec"].load(raw)
        return cls(**kwargs)


# --- enumerations ----------------------------------------------------------


class AssetMintStatus(str, Enum):
    """Where an asset lives: on L2, being minted, or minted on Solana."""

    L2 = "l2"
    MINTING = "minting"
    L1_SOLANA = "l1_solana"


class Context(str, Enum):
    """Display context a file is meant for."""

    WALLET_DEFAULT = "wallet-default"
    WEB_DESKTOP = "web-desktop"
    WEB_MOBILE = "web-mobile"
    APP_MOBILE = "app-mobile"
    APP_DESKTOP = "app-desktop"
    APP = "app"
    VR = "vr"


class Scope(str, Enum):
    """Scope of an authority over an asset."""

    FULL = "full"
    ROYALTY = "royalty"
    METADATA = "metadata"
    EXTENSION = "extension"

    @classmethod
    def parse(cls, value: str) -> Scope:
        """Read a scope name; anything unknown means full authority."""
        return {"royalty": cls.ROYALTY, "metadata": cls.METADATA, "extension": cls.EXTENSION}.get(
            value, cls.FULL
        )


class RoyaltyModel(str, Enum):
    """How royalties are distributed."""

    CREATORS = "creators"
    FANOUT = "fanout"
    SINGLE = "single"


class OwnershipModel(str, Enum):
    """Whether an asset has a single owner or is a fungible token."""

    SINGLE = "single"
    TOKEN = "token"


class UseMethod(str, Enum):
    """How an asset's uses are consumed."""

    BURN = "Burn"
    MULTIPLE = "Multiple"
    SINGLE = "Single"

    @classmethod
    def parse(cls, value: str) -> UseMethod:
        """Read a use method name; anything unknown means single use."""
        return {"Burn": cls.BURN, "Multiple": cls.MULTIPLE}.get(value, cls.SINGLE)


class RuleSet(str, Enum):
    """Royalty enforcement rule set."""

    NONE = "None"


# --- document parts ---------------------------------------------------------


@dataclass(kw_only=True)
class AssetExtended:
    """An L2 asset with the URI of its metadata and its royalty."""

    asset: L2Asset
    metadata_uri: str
    royalty_basis_points: int | None = None

    def __post_init__(self) -> None:
        if self.royalty_basis_points is None:
            self.royalty_basis_points = self.asset.royalty_basis_points


@dataclass(kw_only=True)
class Quality(_JsonObject):
    """Quality descriptor of a file."""

    schema: str = _req(_STR, key="$$schema")


@dataclass(kw_only=True)
class File(_JsonObject):
    """A file attached to an asset."""

    uri: str | None = _opt(_STR, skip=True)
    cdn_uri: str | None = _opt(_STR, skip=True)
    mime: str | None = _opt(_STR, skip=True)
    quality: Quality | None = _opt(_object(Quality), skip=True)
    contexts: list[Context] | None = _opt(_list(_enum(Context)), skip=True)


@dataclass
class MetadataMap:
    """Metadata fields of an asset, serialised with sorted keys."""

    entries: dict[str, Any] = field(default_factory=dict)

    def set_item(self, key: str, value: Any) -> MetadataMap:
        """Set a field and return this map."""
        self.entries[key] = value
        return self

    def get_item(self, key: str) -> Any:
        """Return a field's value, or None if it is not set."""
        return self.entries.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self.entries

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.entries))

    def __len__(self) -> int:
        return len(self.entries)

    def _to_json(self) -> dict:
        return {key: copy.deepcopy(self.entries[key]) for key in sorted(self.entries)}

    @classmethod
    def _from_json(cls, value: Any) -> MetadataMap:
        if not isinstance(value, dict):
            raise ValueError(f"MetadataMap must be a JSON object, got {value!r}")
        return cls(copy.deepcopy(value))


@dataclass(kw_only=True)
class Content(_JsonObject):
    """Content section of an asset: metadata, files and links."""

    schema: str = _req(_STR, key="$schema")
    json_uri: str = _req(_STR)
    files: list[File] | None = _opt(_list(_object(File)), skip=True)
    metadata: MetadataMap = _req(_object(MetadataMap))
    links: dict[str, Any] | None = _opt(_mapping(_ANY), skip=True)


@dataclass(kw_only=True)
class Authority(_JsonObject):
    """An address with authority over an asset."""

    address: str = _req(_STR)
    scopes: list[Scope] = _req(_list(_enum(Scope)))


@dataclass(kw_only=True)
class Compression(_JsonObject):
    """Compression details; all empty for uncompressed assets."""

    eligible: bool = _req(_BOOL, default=False)
    compressed: bool = _req(_BOOL, default=False)
    data_hash: str = _req(_STR, default="")
    creator_hash: str = _req(_STR, default="")
    asset_hash: str = _req(_STR, default="")
    tree: str = _req(_STR, default="")
    seq: int = _req(_INT, default=0)
    leaf_id: int = _req(_INT, default=0)


@dataclass(kw_only=True)
class Group(_JsonObject):
    """A grouping, such as a collection, the asset belongs to."""

    group_key: str = _req(_STR)
    group_value: str | None = _opt(_STR)
    verified: bool | None = _opt(_BOOL, skip=True)
    collection_metadata: MetadataMap | None = _opt(_object(MetadataMap), skip=True)


@dataclass(kw_only=True)
class Royalty(_JsonObject):
    """Royalty terms of an asset."""

    royalty_model: RoyaltyModel = _req(_enum(RoyaltyModel))
    target: str | None = _opt(_STR)
    percent: float = _req(_FLOAT)
    basis_points: int = _req(_UINT)
    primary_sale_happened: bool = _req(_BOOL)
    locked: bool = _req(_BOOL)


@dataclass(kw_only=True)
class Creator(_JsonObject):
    """A creator of an asset and their royalty share."""

    address: str = _req(_STR)
    share: int = _req(_INT)
    verified: bool = _req(_BOOL)


@dataclass(kw_only=True)
class Ownership(_JsonObject):
    """Ownership of an asset."""

    frozen: bool = _req(_BOOL)
    delegated: bool = _req(_BOOL)
    delegate: str | None = _opt(_STR)
    ownership_model: OwnershipModel = _req(_enum(OwnershipModel))
    owner: str = _req(_STR)


@dataclass(kw_only=True)
class Uses(_JsonObject):
    """Remaining and total uses of an asset."""

    use_method: UseMethod = _req(_enum(UseMethod))
    remaining: int = _req(_UINT)
    total: int = _req(_UINT)


@dataclass(kw_only=True)
class Supply(_JsonObject):
    """Print supply; a missing maximum means unlimited prints."""

    print_max_supply: int | None = _opt(_UINT)
    print_current_supply: int = _req(_UINT)
    edition_nonce: int | None = _opt(_UINT)
    edition_number: int | None = _opt(_UINT, skip=True)


@dataclass(kw_only=True)
class MplCoreInfo(_JsonObject):
    """mpl-core specific counters."""

    num_minted: int | None = _opt(_UINT, skip=True)
    current_size: int | None = _opt(_UINT, skip=True)
    plugins_json_version: int | None = _opt(_UINT)


_PLUGIN_AUTHORITY_KINDS = ("None", "Owner", "UpdateAuthority", "Address")


@dataclass(frozen=True)
class PluginAuthority:
    """Who controls a plugin: nobody, the owner, the update authority or an address."""

    kind: str
    address: str | None = None

    def __post_init__(self) -> None:
        if self.kind not in _PLUGIN_AUTHORITY_KINDS:
            raise ValueError(f"unknown plugin authority {self.kind!r}")
        if (self.kind == "Address") != (self.address is not None):
            raise ValueError("an address is given exactly for the 'Address' authority")

    def _to_json(self) -> Any:
        if self.kind == "Address":
            return {"Address": {"address": self.address}}
        return self.kind

    @classmethod
    def _from_json(cls, value: Any) -> PluginAuthority:
        if isinstance(value, str) and value != "Address":
            return cls(value)
        if isinstance(value, dict) and list(value) == ["Address"]:
            body = value["Address"]
            if isinstance(body, dict) and isinstance(body.get("address"), str):
                return cls("Address", body["address"])
        raise ValueError(f"invalid plugin authority {value!r}")


@dataclass(kw_only=True)
class Royalties(_JsonObject):
    """Royalties plugin data."""

    basis_points: int = _req(_UINT)
    creators: list[Creator] = _req(_list(_object(Creator)))
    rule_set: RuleSet = _req(_enum(RuleSet))


@dataclass(kw_only=True)
class PluginSchemaV1(_JsonObject):
    """A plugin record of an mpl-core asset."""

    index: int = _req(_UINT)
    offset: int = _req(_UINT)
    authority: PluginAuthority = _req(_object(PluginAuthority))
    data: Royalties = _req(_object(Royalties))


# --- JSON path selection and file parsing ----------------------------------

_PATH_STEP = re.compile(r"""\.(\*|[^.\[\]]+)|\[\s*(\*|-?\d+|'[^']*'|"[^"]*")\s*\]""")


def _path_steps(expr: str) -> list[tuple[str, Any]]:
    expr = expr.strip()
    if not expr.startswith("$"):
        raise ValueError(f"path must start at the root: {expr!r}")
    steps: list[tuple[str, Any]] = []
    position = 1
    while position < len(expr):
        match = _PATH_STEP.match(expr, position)
        if match is None:
            raise ValueError(f"invalid path {expr!r} at {position}")
        position = match.end()
        dotted, bracketed = match.groups()
        if dotted is not None:
            steps.append(("wild", None) if dotted == "*" else ("key", dotted))
        elif bracketed == "*":
            steps.append(("wild", None))
        elif bracketed[0] in "'\"":
            steps.append(("key", bracketed[1:-1]))
        else:
            steps.append(("index", int(bracketed)))
    return steps


def _children(node: Any, step: tuple[str, Any]) -> list[Any]:
    kind, arg = step
    if kind == "wild":
        if isinstance(node, list):
            return list(node)
        if isinstance(node, dict):
            return list(node.values())
        return []
    if kind == "key":
        return [node[arg]] if isinstance(node, dict) and arg in node else []
    if isinstance(node, list) and -len(node) <= arg < len(node):
        return [node[arg]]
    return []


def _select(document: Any, expr: str) -> list[Any]:
    nodes = [document]
    for step in _path_steps(expr):
        nodes = [child for node in nodes for child in _children(node, step)]
    return nodes


def _matches(document: Any, expr: str) -> list[Any]:
    try:
        return _select(document, expr)
    except ValueError:
        return []


def safe_select(document: Any, expr: str) -> Any:
    """Return the last value a JSON path selects, or None if it selects nothing."""
    found = _matches(document, expr)
    return found[-1] if found else None


def _json_text(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def to_uri(uri: str) -> SplitResult | None:
    """Parse an absolute URL; return None if it is not one."""
    uri = uri.strip()
    if not _SCHEME.match(uri):
        return None
    try:
        parts = urlsplit(uri)
        host = parts.hostname
    except ValueError:
        return None
    if parts.scheme.lower() in _HOST_SCHEMES and not host:
        return None
    return parts


def get_mime_type_from_uri(uri: str) -> str:
    """Guess the MIME type from the URL's path, defaulting to image/png."""
    parts = to_uri(uri)
    if parts is None or not parts.path:
        return DEFAULT_MIME_TYPE
    mime, _ = _MIME_TYPES.guess_type(parts.path)
    return mime or DEFAULT_MIME_TYPE


def file_from_str(uri: str) -> File:
    """Make a file entry for a URI, guessing its MIME type."""
    return File(uri=uri, mime=get_mime_type_from_uri(uri))


def track_top_level_file(file_map: dict[str, File], top_level_file: Any) -> None:
    """Add a top-level link such as the image to the files, unless already there."""
    if isinstance(top_level_file, str) and top_level_file not in file_map:
        file_map[top_level_file] = file_from_str(top_level_file)


def parse_files(metadata: Any) -> tuple[dict[str, Any], list[File]]:
    """Read the links and files of NFT metadata; the image file comes first."""
    links: dict[str, Any] = {}
    for name in _LINK_FIELDS:
        found = _matches(metadata, f"$.{name}")
        if found:
            links[name] = copy.deepcopy(found[-1])

    file_map: dict[str, File] = {}
    for entry in _matches(metadata, "$.properties.files[*]"):
        if isinstance(entry, dict):
            # Some metadata says 'url' where the standard says 'uri'.
            uri = entry["uri"] if "uri" in entry else entry.get("url", _ABSENT)
            mime = entry.get("type", _ABSENT)
            if uri is _ABSENT:
                continue
            if mime is _ABSENT:
                text = _json_text(uri)
                file_map[text] = file_from_str(text)
            elif isinstance(uri, str):
                if isinstance(mime, str):
                    file_map[uri] = File(uri=uri, mime=mime)
                else:
                    logger.warning("Mime is not string: %r", mime)
                    file_map[uri] = file_from_str(uri)
            else:
                logger.warning("URI is not string: %r", uri)
        elif isinstance(entry, str):
            file_map[entry] = file_from_str(entry)

    track_top_level_file(file_map, links.get("image"))
    track_top_level_file(file_map, links.get("animation_url"))

    image = links.get("image")
    files = sorted(file_map.values(), key=lambda f: not (isinstance(image, str) and f.uri == image))
    return links, files


# --- the asset document -----------------------------------------------------


@dataclass(kw_only=True)
class Asset(_JsonObject):
    """A DAS asset document."""

    interface: str = _req(_STR)
    id: str = _req(_STR)
    content: Content | None = _opt(_object(Content), skip=True)
    authorities: list[Authority] | None = _opt(_list(_object(Authority)), skip=True)
    compression: Compression | None = _opt(_object(Compression), skip=True)
    grouping: list[Group] | None = _opt(_list(_object(Group)), skip=True)
    royalty: Royalty | None = _opt(_object(Royalty), skip=True)
    creators: list[Creator] | None = _opt(_list(_object(Creator)), skip=True)
    ownership: Ownership = _req(_object(Ownership))
    uses: Uses | None = _opt(_object(Uses), skip=True)
    supply: Supply | None = _opt(_object(Supply))
    mutable: bool = _req(_BOOL)
    burnt: bool = _req(_BOOL)
    lamports: int | None = _opt(_UINT, skip=True)
    executable: bool | None = _opt(_BOOL, skip=True)
    metadata_owner: str | None = _opt(_STR, skip=True)
    rent_epoch: int | None = _opt(_UINT, skip=True)
    plugins: PluginSchemaV1 | None = _opt(_object(PluginSchemaV1), skip=True)
    unknown_plugins: Any = _opt(_ANY, skip=True)
    mpl_core_info: MplCoreInfo | None = _opt(_object(MplCoreInfo), skip=True)
    external_plugins: Any = _opt(_ANY, skip=True)
    unknown_external_plugins: Any = _opt(_ANY, skip=True)
    spl20: Any = _opt(_ANY, skip=True)

    @classmethod
    def from_extended(cls, extended: AssetExtended, metadata: Any) -> Asset:
        """Build the document for an L2 asset from its parsed metadata JSON."""
        l2_asset = extended.asset
        royalty_basis_points = extended.royalty_basis_points
        meta = MetadataMap().set_item("name", l2_asset.name).set_item("symbol", "")
        for key in ("description", "attributes"):
            found = _matches(metadata, f"$.{key}")
            if found:
                meta.set_item(key, copy.deepcopy(found[-1]))

        links, files = parse_files(metadata)
        creators = [Creator(address=l2_asset.creator, share=100, verified=True)]
        grouping = None
        if l2_asset.collection is not None:
            grouping = [
                Group(
                    group_key=COLLECTION_GROUP_KEY,
                    group_value=pubkey_to_string(l2_asset.collection),
                    verified=True,
                )
            ]

        return cls(
            interface="MplCoreAsset",
            id=pubkey_to_string(l2_asset.pubkey),
            content=Content(
                schema=CONTENT_SCHEMA,
                json_uri=extended.metadata_uri,
                files=files,
                metadata=meta,
                links=links,
            ),
            authorities=[Authority(address=l2_asset.authority, scopes=[Scope.FULL])],
            compression=Compression(),
            grouping=grouping,
            royalty=Royalty(
                royalty_model=RoyaltyModel.CREATORS,
                target=None,
                percent=royalty_basis_points * 0.0001,
                basis_points=royalty_basis_points,
                primary_sale_happened=False,
                locked=False,
            ),
            creators=creators,
            ownership=Ownership(
                frozen=False,
                delegated=False,
                delegate=None,
                ownership_model=OwnershipModel.SINGLE,
                owner=l2_asset.owner,
            ),
            supply=None,
            mutable=True,
            burnt=False,
            plugins=PluginSchemaV1(
                index=0,
                offset=0,
                authority=PluginAuthority("UpdateAuthority"),
                data=Royalties(
                    basis_points=royalty_basis_points,
                    creators=copy.deepcopy(creators),
                    rule_set=RuleSet.NONE,
                ),
            ),
        )

    @classmethod
    def from_json(cls, value: Any) -> Asset:
        """Read a document from decoded JSON; raise ValueError if it is malformed."""
        return cls._from_json(value)

    def to_json(self) -> dict:
        """Return the document as decoded JSON."""
        return self._to_json()

    @staticmethod
    def empty_json() -> Any:
        """JSON value standing for a missing asset: null."""
        return EMPTY_ASSET_JSON