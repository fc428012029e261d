"""
Type metadata cache.

The first time an asset type is referenced its view and create properties
are fetched from ``/types/<name>`` and classified once. Entries are never
invalidated: a long-lived client assumes the remote schema does not change.
A type whose details cannot be fetched or parsed is left uncached (nothing
partial is kept) and every dependent lookup degrades to ``None`` / ``False``.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from igc_client.constants import KIND_ENUM, KIND_STRING, MOD_CREATED_ON, PROPERTIES_TO_IGNORE
from igc_client.contracts.types import TypeDetails
from igc_client.errors import IGCClientError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TypeMetadata:
    type_name: str
    display_name: Optional[str]
    creatable: bool
    all_properties: Tuple[str, ...] = ()
    non_relationship_properties: Tuple[str, ...] = ()
    string_properties: Tuple[str, ...] = ()
    paged_relationship_properties: Tuple[str, ...] = ()
    has_modification_details: bool = False


def classify_type(type_name: str, details: TypeDetails) -> TypeMetadata:
    all_properties: List[str] = []
    non_relationship: List[str] = []
    string_properties: List[str] = []
    paged_relationship: List[str] = []
    has_modification_details = False

    for prop in details.view_properties:
        name = prop.name
        if name in PROPERTIES_TO_IGNORE:
            continue
        if name == MOD_CREATED_ON:
            has_modification_details = True
        kind = prop.type.kind
        if kind == KIND_STRING:
            string_properties.append(name)
            non_relationship.append(name)
        elif kind == KIND_ENUM:
            non_relationship.append(name)
        elif prop.type.is_relationship:
            if prop.max_cardinality < 0:
                paged_relationship.append(name)
        else:
            non_relationship.append(name)
        all_properties.append(name)

    return TypeMetadata(
        type_name=type_name,
        display_name=details.name,
        creatable=bool(details.create_properties),
        all_properties=tuple(all_properties),
        non_relationship_properties=tuple(non_relationship),
        string_properties=tuple(string_properties),
        paged_relationship_properties=tuple(paged_relationship),
        has_modification_details=has_modification_details,
    )


OnCached = Callable[[str, TypeDetails, TypeMetadata], None]


class TypeMetadataCache:
    def __init__(self, fetch_details: Callable[[str], TypeDetails], on_cached: Optional[OnCached] = None) -> None:
        self.fetch_details = fetch_details
        # Runs before an entry is committed; raising leaves the type uncached
        self.on_cached = on_cached
        self._entries: Dict[str, TypeMetadata] = {}
        self._lock = threading.RLock()

    def ensure_cached(self, type_name: Optional[str]) -> bool:
        """Fetch and classify ``type_name`` unless already cached. Returns whether it is cached."""
        if not type_name:
            return False
        with self._lock:
            if type_name in self._entries:
                return True
            try:
                details = self.fetch_details(type_name)
                metadata = classify_type(type_name, details)
                if self.on_cached is not None:
                    self.on_cached(type_name, details, metadata)
            except IGCClientError as e:
                logger.error("Unable to cache details for type %s: %s", type_name, e)
                return False
            self._entries[type_name] = metadata
        logger.debug(
            "Cached type %s: %s properties (%s paged relationships)",
            type_name,
            len(metadata.all_properties),
            len(metadata.paged_relationship_properties),
        )
        return True

    def get(self, type_name: Optional[str]) -> Optional[TypeMetadata]:
        if not self.ensure_cached(type_name):
            return None
        return self.peek(type_name)

    def peek(self, type_name: Optional[str]) -> Optional[TypeMetadata]:
        """The cached entry without triggering a fetch."""
        with self._lock:
            return self._entries.get(type_name)

    def is_cached(self, type_name: Optional[str]) -> bool:
        return self.peek(type_name) is not None

    def cached_types(self) -> List[str]:
        with self._lock:
            return sorted(self._entries)
