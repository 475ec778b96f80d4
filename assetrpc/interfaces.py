"""Abstract services and storages for L2 assets, and their errors."""

from __future__ import annotations

import string
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from assetrpc.l2 import AssetSorting, L2Asset


def _placeholder_count(template: str) -> int:
    return sum(1 for _, name, _, _ in string.Formatter().parse(template) if name is not None)


class _KindError(Exception):
    _MESSAGES: dict[str, str] = {}

    def __init__(self, kind: str, *details: str) -> None:
        template = self._MESSAGES.get(kind)
        if template is None:
            raise ValueError(f"unknown {type(self).__name__} kind {kind!r}")
        if len(details) != _placeholder_count(template):
            raise ValueError(f"{kind!r} takes {_placeholder_count(template)} detail(s)")
        self.kind = kind
        self.details = details
        super().__init__(template.format(*details))


@dataclass
class L2AssetInfo:
    """An L2 asset together with its metadata JSON, if any."""

    asset: L2Asset
    metadata: str | None = None


class AssetService(ABC):
    """Creation, lookup and L1 minting of L2 assets."""

    @abstractmethod
    async def create_asset(
        self,
        metadata_json: str,
        owner: str,
        creator: str,
        authority: str,
        name: str,
        royalty_basis_points: int,
        collection: bytes | None,
    ) -> L2AssetInfo:
        """Create an L2 asset with the given authority and return it.

        royalty_basis_points is a percentage in hundredths, from 0 to 10000.
        """

    @abstractmethod
    async def update_asset(
        self,
        asset_pubkey: bytes,
        metadata_json: str | None,
        owner: str | None,
        creator: str | None,
        authority: str | None,
        name: str | None,
        collection: Any = ...,
    ) -> L2AssetInfo | None:
        """Update an L2 asset; None leaves a field as is.

        For collection, Ellipsis leaves it as is and None clears it.
        """

    @abstractmethod
    async def fetch_asset(self, asset_pubkey: bytes) -> L2AssetInfo | None:
        """Fetch one L2 asset."""

    @abstractmethod
    async def fetch_assets(self, asset_pubkeys: Sequence[bytes]) -> list[L2AssetInfo]:
        """Fetch the L2 assets that exist among the given keys."""

    @abstractmethod
    async def fetch_metadata(self, asset_pubkey: bytes) -> str | None:
        """Fetch the metadata JSON of an asset."""

    @abstractmethod
    async def fetch_assets_by_owner(
        self,
        owner_pubkey: str,
        sorting: AssetSorting,
        limit: int,
        before: str | None,
        after: str | None,
    ) -> list[L2AssetInfo]:
        """Fetch a page of assets held by an owner."""

    @abstractmethod
    async def fetch_assets_by_creator(
        self,
        creator_pubkey: str,
        sorting: AssetSorting,
        limit: int,
        before: str | None,
        after: str | None,
    ) -> list[L2AssetInfo]:
        """Fetch a page of assets made by a creator."""

    @abstractmethod
    async def get_mint_status(self, public_key: bytes) -> tuple[Any, bytes | None]:
        """Return the mint status of an asset and its L1 transaction signature."""

    @abstractmethod
    async def execute_asset_l1_mint(self, tx: Any, exec_sync: bool) -> None:
        """Execute an L1 mint transaction received from a client."""


class L1MintError(_KindError):
    """An L1 mint request that cannot be accepted."""

    _MESSAGES = {
        "not_unlocked_l2_asset": "Either locked or already minted",
        "wrong_name": "Wrong asset name, expected='{0}', actual='{1}'",
        "wrong_metadata_uri": "Wrong metadata URI",
        "missing_authority": "Missing authority",
        "wrong_authority": "Wrong authority",
        "missing_owner": "Missing owner",
        "wrong_owner": "Wrong owner",
        "wrong_collection": "Wrong collection",
    }


class AssetMetadataStorage(ABC):
    """Storage of asset metadata JSON documents."""

    @abstractmethod
    async def put_json(self, pubkey: bytes, json_metadata: str) -> None:
        """Store the metadata of an asset."""

    @abstractmethod
    async def get_json(self, pubkey: bytes) -> str | None:
        """Load the metadata of an asset."""

    @abstractmethod
    async def get_json_batch(self, pubkeys: Sequence[bytes]) -> list[str | None]:
        """Load metadata for several assets, in the order given."""


class BlobStorage(ABC):
    """Storage of binary asset content."""

    @abstractmethod
    async def put_binary(self, pubkey: bytes, data: bytes, mime: str) -> None:
        """Store binary content with its MIME type."""

    @abstractmethod
    async def get_binary(self, pubkey: bytes) -> tuple[bytes, str]:
        """Load binary content and its MIME type."""


@dataclass
class ParsedMintIxInfo:
    """Fields read from an mpl-core create instruction."""

    asset_pubkey: bytes
    authority: bytes | None
    owner: bytes | None
    payer: bytes
    collection: bytes | None
    name: str
    uri: str


class L1Service(ABC):
    """Access to the L1 chain for minting assets."""

    @abstractmethod
    def parse_mint_transaction(self, tx: Any) -> ParsedMintIxInfo:
        """Read the single create instruction from a client transaction."""

    @abstractmethod
    async def execute_mint_transaction(self, tx: Any, asset_keypair: Any, exec_sync: bool) -> bytes:
        """Sign with the asset keypair, send the transaction and return its signature."""

    @abstractmethod
    async def is_asset_minted(self, tx_signature: bytes) -> bool:
        """Return True if minted, False if declined; raise if unknown or pending."""


class L1MintTransactionError(_KindError):
    """A mint transaction that is not in the expected shape."""

    _MESSAGES = {
        "no_instruction": "Transaction contains no instructions",
        "unexpected_instructions": "Transaction contains other unexpected instructions",
        "malformed_transaction": "Malformed transaction",
        "malformed_mint_asset_instruction": "Malformed mpl-code create v1 instruction",
        "wrong_mpl_core_program_id": "Wrong mpl-core program id",
    }


class L2Storage(ABC):
    """Persistent storage of L2 assets."""

    @abstractmethod
    async def save(self, asset: L2Asset) -> None:
        """Insert or update an asset."""

    @abstractmethod
    async def find(self, pubkey: bytes) -> L2Asset | None:
        """Find one asset."""

    @abstractmethod
    async def find_batch(self, pubkeys: Sequence[bytes]) -> list[L2Asset]:
        """Find the assets that exist among the given keys."""

    @abstractmethod
    async def find_by_owner(
        self,
        owner_pubkey: str,
        sorting: AssetSorting,
        limit: int,
        before: str | None,
        after: str | None,
    ) -> list[L2Asset]:
        """Find a page of assets by owner."""

    @abstractmethod
    async def find_by_creator(
        self,
        creator_pubkey: str,
        sorting: AssetSorting,
        limit: int,
        before: str | None,
        after: str | None,
    ) -> list[L2Asset]:
        """Find a page of assets by creator."""

    @abstractmethod
    async def lock_asset_before_minting(self, pubkey: bytes) -> bool:
        """Atomically move an asset into minting state; False if not possible."""

    @abstractmethod
    async def find_l1_asset_signature(self, asset_pubkey: bytes) -> bytes | None:
        """Return the L1 mint transaction signature of an asset."""

    @abstractmethod
    async def add_l1_asset(self, pubkey: bytes, tx_signature: bytes) -> None:
        """Record the L1 mint transaction of an asset."""

    @abstractmethod
    async def finalize_mint(self, pubkey: bytes) -> None:
        """Mark an asset as minted on L1."""

    @abstractmethod
    async def mint_didnt_happen(self, pubkey: bytes) -> None:
        """Return an asset from minting state to L2."""

    @abstractmethod
    async def get_mint_status_and_signature(self, pubkey: bytes) -> tuple[Any, bytes | None]:
        """Return the mint status and L1 signature of an asset."""

    @abstractmethod
    async def get_pubkeys_and_signatures_of_assets_in_minting_status(self) -> list[tuple[bytes, bytes]]:
        """List assets currently being minted with their signatures."""


@dataclass(frozen=True)
class DerivationValues:
    """Account and address numbers for BIP44 derivation."""

    account: int
    address: int


class Bip44DerivationSequence(ABC):
    """Pair of increment-only counters feeding BIP44 derivation paths."""

    @abstractmethod
    async def next_account_and_address(self) -> DerivationValues:
        """Return the next account and address values."""


class L2StorageError(LookupError):
    """No L2 asset exists for the given key."""

    def __init__(self, pubkey: bytes) -> None:
        self.pubkey = bytes(pubkey)
        super().__init__(f"No asset identified by pubkey={list(self.pubkey)}")