"""
Client library for the IBM Information Governance Catalog (IGC) REST API.

Key pieces:
- IGCRestClient: session-managed access to assets, searches and type metadata
- contracts: the reference / paging / type shapes exchanged with IGC
- search: builder for the JSON body of a search request
"""

from .client import IGCRestClient
from .config import IGCClientConfig, config_from_env, load_client_config
from .contracts import ItemList, ModelRegistry, Paging, Reference, TypeDetails
from .errors import (
    AuthenticationError,
    ClientConfigurationError,
    IGCClientError,
    SchemaResolutionError,
    SerializationError,
    TransportError,
)
from .search import Search, SearchCondition, SearchConditionSet, SearchSorting
from .type_cache import TypeMetadata

__all__ = [
    "IGCRestClient",
    # config
    "IGCClientConfig", "config_from_env", "load_client_config",
    # contracts
    "ItemList", "ModelRegistry", "Paging", "Reference", "TypeDetails", "TypeMetadata",
    # search
    "Search", "SearchCondition", "SearchConditionSet", "SearchSorting",
    # errors
    "AuthenticationError", "ClientConfigurationError", "IGCClientError",
    "SchemaResolutionError", "SerializationError", "TransportError",
]
