"""API keys and the users they belong to."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Username:
    """Name of an API user."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class ApiKey:
    """An API key; its value is never shown in repr."""

    value: str = field(repr=False)

    def __repr__(self) -> str:
        return "ApiKey(********)"


@dataclass
class ApiKeys:
    """Lookup table from API keys to user names."""

    keys: Mapping[ApiKey, Username] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.keys = dict(self.keys)

    def contains_api_key_then_get_username(self, provided_api_key: str) -> Username | None:
        """Return the user owning the given key, or None if the key is unknown."""
        return self.keys.get(ApiKey(provided_api_key))