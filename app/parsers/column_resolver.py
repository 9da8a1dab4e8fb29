"""
app/parsers/column_resolver.py

Header-to-column binding for exports whose column order varies by vendor.

Matching policy: headers are lowercased and trimmed, a semantic key binds to
the first column whose header contains any of the key's variants, and later
matching columns are ignored. A single header may bind several keys. A key
may also list exclusions: headers containing one of them never bind it.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType

from app.parsers.coercion import clean_string


@dataclass(frozen=True)
class ColumnMap:
    """
    Immutable semantic-key -> column-index bindings for one parse call.
    """

    bindings: Mapping[str, int] = field(default_factory=dict)
    headers: tuple[str, ...] = ()

    def index_of(self, key: str) -> int | None:
        return self.bindings.get(key)

    def is_bound(self, key: str) -> bool:
        return key in self.bindings

    def get(self, row: Sequence[str], key: str) -> str:
        """
        Return the cleaned cell for key, or "" when unbound or the row is short.
        """

        index = self.bindings.get(key)
        if index is None or index >= len(row):
            return ""
        return clean_string(row[index])

    def unbound_keys(self, keys: Sequence[str]) -> list[str]:
        return [key for key in keys if key not in self.bindings]


class ColumnResolver:
    """
    Compiles a declarative variant table against a header row.
    """

    def __init__(
        self,
        variants: Mapping[str, Sequence[str]],
        exclusions: Mapping[str, Sequence[str]] | None = None,
    ) -> None:
        self._variants = {
            key: tuple(variant.lower() for variant in options)
            for key, options in variants.items()
        }
        self._exclusions = {
            key: tuple(excluded.lower() for excluded in options)
            for key, options in (exclusions or {}).items()
        }

    @property
    def keys(self) -> list[str]:
        return list(self._variants)

    def resolve(self, headers: Sequence[str]) -> ColumnMap:
        bindings: dict[str, int] = {}
        normalized = tuple(header.lower().strip() for header in headers)

        for index, header in enumerate(normalized):
            for key, options in self._variants.items():
                if key in bindings:
                    continue
                if any(excluded in header for excluded in self._exclusions.get(key, ())):
                    continue
                if any(option in header for option in options):
                    bindings[key] = index

        return ColumnMap(bindings=MappingProxyType(bindings), headers=normalized)
