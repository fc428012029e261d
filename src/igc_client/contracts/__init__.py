"""
Contracts (data models).

Request/response shapes exchanged with the IGC REST API:
- references, paging and item lists returned by searches and asset fetches
- type descriptors returned by the type introspection endpoints
- the registry mapping IGC type names to model classes

The client and its tests rely on these models rather than on ad-hoc dicts.
"""

from .references import ItemList, Paging, Reference
from .registry import ModelRegistry, attribute_name_for_property, class_name_for_type, decode_json
from .types import TypeDetails, TypeHeader, TypeInfo, TypeProperty, TypeReference

__all__ = [
    # references
    "ItemList", "Paging", "Reference",
    # types
    "TypeDetails", "TypeHeader", "TypeInfo", "TypeProperty", "TypeReference",
    # registry
    "ModelRegistry", "attribute_name_for_property", "class_name_for_type", "decode_json",
]
