"""L2 asset records, sorting options and public key encoding."""

from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass, field
from enum import Enum

PUBLIC_KEY_LENGTH = 32

_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_INDEX = {char: position for position, char in enumerate(_ALPHABET)}


def _b58encode(data: bytes) -> str:
    number = int.from_bytes(data, "big")
    digits = []
    while number:
        number, remainder = divmod(number, 58)
        digits.append(_ALPHABET[remainder])
    leading_zeros = len(data) - len(data.lstrip(b"\0"))
    return "1" * leading_zeros + "".join(reversed(digits))


def _b58decode(text: str) -> bytes:
    number = 0
    for char in text:
        try:
            number = number * 58 + _INDEX[char]
        except KeyError:
            raise ValueError(f"invalid base58 character {char!r}") from None
    leading_ones = len(text) - len(text.lstrip("1"))
    body = number.to_bytes((number.bit_length() + 7) // 8, "big")
    return b"\0" * leading_ones + body


def pubkey_to_string(pubkey: bytes) -> str:
    """Encode a 32-byte public key as base58."""
    pubkey = bytes(pubkey)
    if len(pubkey) != PUBLIC_KEY_LENGTH:
        raise ValueError(f"public key must be {PUBLIC_KEY_LENGTH} bytes, got {len(pubkey)}")
    return _b58encode(pubkey)


def pubkey_from_string(value: str) -> bytes | None:
    """Decode a base58 public key; return None if it is not a valid 32-byte key."""
    try:
        decoded = _b58decode(value)
    except ValueError:
        return None
    if len(decoded) != PUBLIC_KEY_LENGTH:
        return None
    return decoded


def _check_pubkey(name: str, value: bytes) -> bytes:
    value = bytes(value)
    if len(value) != PUBLIC_KEY_LENGTH:
        raise ValueError(f"{name} must be {PUBLIC_KEY_LENGTH} bytes, got {len(value)}")
    return value


@dataclass
class L2Asset:
    """An asset held in L2 state.

    Owner, creator and authority are plain strings because an L2 asset may
    carry keys that are not Solana keys.
    """

    pubkey: bytes
    name: str
    owner: str
    creator: str
    collection: bytes | None
    authority: str
    royalty_basis_points: int
    create_timestamp: _dt.datetime
    update_timestamp: _dt.datetime
    bip44_account_num: int
    bip44_address_num: int

    def __post_init__(self) -> None:
        self.pubkey = _check_pubkey("pubkey", self.pubkey)
        if self.collection is not None:
            self.collection = _check_pubkey("collection", self.collection)
        if not 0 <= self.royalty_basis_points <= 0xFFFF:
            raise ValueError("royalty_basis_points must fit in 16 bits")
        for name in ("bip44_account_num", "bip44_address_num"):
            if not 0 <= getattr(self, name) <= 0xFFFFFFFF:
                raise ValueError(f"{name} must fit in 32 bits")


class AssetSortBy(str, Enum):
    """Column that L2 assets are sorted by."""

    CREATED = "asset_create_timestamp"
    UPDATED = "asset_update_timestamp"

    def __str__(self) -> str:
        return self.value


class AssetSortDirection(str, Enum):
    """Direction of L2 asset sorting."""

    ASC = "ASC"
    DESC = "DESC"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class AssetSorting:
    """Sorting options for L2 asset queries."""

    sort_by: AssetSortBy = field(default=AssetSortBy.CREATED)
    sort_direction: AssetSortDirection = field(default=AssetSortDirection.DESC)