"""
IGC REST client.

Purpose:
- Connects to an IBM Information Governance Catalog environment and keeps one
  session open for the life of the client (re-opening it once when it expires)
- Fetches, searches, creates, updates and deletes assets
- Caches type metadata and gives by-name access to asset properties

Usage:
    client = IGCRestClient("https://igc.example.com:9443", "isadmin", "secret")
    client.open_session()
    term = client.get_asset_ref_by_id("6662c0f2.e1b1ec6c.00263shl8.8d1ve9h.n8ag5s.f8iej8q1jfjj9vhfllrrb")
    client.populate_context(term)

Concurrency:
- One client instance is meant to serve one caller at a time. The session,
  the type cache and the property accessors are lock-protected so that a
  shared instance does not corrupt them, but requests themselves are not
  serialised.
- Calls block until the remote end responds; there is no timeout unless one
  is configured.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence, Type, Union

from pydantic import ValidationError

from igc_client.config import IGCClientConfig
from igc_client.constants import (
    CATCHALL_TYPE,
    EP_ASSET,
    EP_BUNDLE_ASSETS,
    EP_BUNDLES,
    EP_LOGOUT,
    EP_SEARCH,
    EP_TYPES,
    ID_LOOKUP_TYPES,
    JSON,
    MOD_CREATED_BY,
    MOD_CREATED_ON,
    MODIFICATION_PROPERTIES,
    PROBE_TYPES,
    XML,
    asset_type_for_search,
)
from igc_client.contracts.references import ItemList, Paging, Reference
from igc_client.contracts.registry import ModelRegistry, decode_json
from igc_client.contracts.types import TypeDetails, TypeHeader
from igc_client.errors import (
    ClientConfigurationError,
    IGCClientError,
    SchemaResolutionError,
    SerializationError,
    TransportError,
)
from igc_client.executor import RequestExecutor
from igc_client.paging import PageAssembler
from igc_client.properties import PropertyRegistry
from igc_client.search import Search, SearchSorting, id_equals
from igc_client.session import SessionStore, encode_basic_auth
from igc_client.type_cache import TypeMetadata, TypeMetadataCache

logger = logging.getLogger(__name__)

Payload = Union[str, Mapping[str, Any]]


def _as_json(payload: Payload) -> str:
    return payload if isinstance(payload, str) else json.dumps(payload)


class IGCRestClient:
    def __init__(
        self,
        base_url: str,
        user: Optional[str] = None,
        password: Optional[str] = None,
        *,
        authorization: Optional[str] = None,
        default_page_size: int = 100,
        timeout: Optional[float] = None,
        generate_models: bool = True,
        http: Any = None,
        models: Optional[ModelRegistry] = None,
    ) -> None:
        if not base_url or not base_url.startswith("https://"):
            logger.error("Cannot instantiate IGCRestClient -- base_url must be https: %s", base_url)
            raise ClientConfigurationError(f"base_url must be https: {base_url}")
        if authorization is None:
            if not user or password is None:
                raise ClientConfigurationError("Either user and password, or a basic authorization, is required")
            authorization = encode_basic_auth(user, password)

        self.base_url = base_url.rstrip("/")
        self.default_page_size = default_page_size
        self.generate_models = generate_models
        self.successfully_initialised = False

        self.session = SessionStore(authorization)
        self.executor = RequestExecutor(self.session, http=http, timeout=timeout)
        self.models = models if models is not None else ModelRegistry()
        self.types = TypeMetadataCache(self.get_type_details, on_cached=self._on_type_cached)
        self.properties = PropertyRegistry(self.get_model_for_type, self.get_all_properties_for_type)
        self.pages = PageAssembler(self._get_body, self.models.build_item_list)
        logger.debug("Constructed IGCRestClient for %s", self.base_url)

    @classmethod
    def from_host(cls, host: str, port: Union[str, int], user: str, password: str, **kwargs: Any) -> "IGCRestClient":
        return cls(f"https://{host}:{port}", user, password, **kwargs)

    @classmethod
    def from_config(cls, config: IGCClientConfig, http: Any = None) -> "IGCRestClient":
        client = cls(
            config.base_url,
            config.session.user,
            config.session.resolve_password(),
            default_page_size=config.paging.default_page_size,
            timeout=config.session.timeout_seconds,
            generate_models=config.generate_models,
            http=http,
        )
        if config.open_session:
            client.open_session()
        return client

    @property
    def workflow_enabled(self) -> bool:
        return self.pages.workflow_enabled

    # --- Session ---------------------------------------------------------------

    def open_session(self) -> bool:
        """
        Run a small probe search to open the session and detect whether
        workflow is enabled (any draft glossary content means it is).
        """
        probe = Search(PROBE_TYPES[0])
        for asset_type in PROBE_TYPES[1:]:
            probe.add_type(asset_type)
        probe.set_page_size(1).set_dev_glossary(True)
        try:
            results = self.search(probe)
        except IGCClientError as e:
            logger.error("Unable to open a session with IGC at %s: %s", self.base_url, e)
            self.successfully_initialised = False
            return False
        self.pages.workflow_enabled = results.paging.num_total > 0
        self.successfully_initialised = True
        logger.info("Opened IGC session at %s (workflow enabled: %s)", self.base_url, self.workflow_enabled)
        return True

    def disconnect(self) -> None:
        """Log out of IGC, invalidating the session."""
        try:
            self.make_request(EP_LOGOUT, "GET")
        finally:
            self.session.invalidate()

    # --- Raw requests ------------------------------------------------------------

    def make_request(
        self,
        endpoint: str,
        method: str = "GET",
        content_type: Optional[str] = None,
        payload: Optional[str] = None,
    ) -> Optional[str]:
        """Body of the response (None when empty). Raises TransportError once retrying is exhausted."""
        response = self.executor.execute(self.base_url + endpoint, method, content_type, payload)
        return response.text if response.content else None

    def make_create_request(self, endpoint: str, method: str, content_type: str, payload: str) -> Optional[str]:
        """Id of the created instance, taken from the Location header of a 201 response."""
        url = self.base_url + endpoint
        response = self.executor.execute(url, method, content_type, payload)
        if response.status_code != 201:
            logger.error("Unable to create instance -- unexpected status %s from %s", response.status_code, url)
            raise TransportError(
                f"Create request to {url} returned status {response.status_code}",
                method=method,
                url=url,
                status_code=response.status_code,
            )
        location = response.headers.get("Location")
        if not location or "," in location:
            logger.warning("Created instance at %s but could not identify a single Location: %s", url, location)
            return None
        return location.rstrip("/").rsplit("/", 1)[-1]

    def upload_file(self, endpoint: str, method: str, path: Union[str, Path]) -> bool:
        path = Path(path)
        try:
            response = self.executor.upload(self.base_url + endpoint, method, path.name, path.read_bytes())
        except TransportError as e:
            logger.error("Unable to upload %s to %s: %s", path, endpoint, e)
            return False
        return response.status_code == 200

    def _get_body(self, endpoint: str) -> Optional[str]:
        return self.make_request(endpoint, "GET")

    # --- Types -------------------------------------------------------------------

    def get_types(self) -> List[TypeHeader]:
        body = self.make_request(EP_TYPES, "GET")
        try:
            payload = decode_json(body)
            if not isinstance(payload, list):
                raise SerializationError("Expected a list of types", payload=payload)
            return [TypeHeader.model_validate(t) for t in payload]
        except (SerializationError, ValidationError) as e:
            logger.error("Unable to parse types response: %s", e)
            return []

    def get_type_details(self, type_name: str) -> TypeDetails:
        body = self.make_request(
            f"{EP_TYPES}/{type_name}?showViewProperties=true&showCreateProperties=true&showEditProperties=true",
            "GET",
        )
        try:
            return TypeDetails.model_validate(decode_json(body))
        except (SerializationError, ValidationError) as e:
            raise SchemaResolutionError(f"Unable to parse type details for {type_name}: {e}", type_name=type_name) from e

    def cache_type_details(self, type_name: str) -> bool:
        return self.types.ensure_cached(type_name)

    def get_type_metadata(self, type_name: str) -> Optional[TypeMetadata]:
        return self.types.get(type_name)

    def is_creatable(self, type_name: str) -> bool:
        metadata = self.types.get(type_name)
        return bool(metadata and metadata.creatable)

    def has_modification_details(self, type_name: Optional[str]) -> bool:
        # Only known once the type has been cached; never triggers a fetch
        metadata = self.types.peek(type_name)
        return bool(metadata and metadata.has_modification_details)

    def get_display_name(self, type_name: str) -> Optional[str]:
        metadata = self.types.get(type_name)
        return metadata.display_name if metadata else None

    def get_all_properties_for_type(self, type_name: Optional[str]) -> Optional[List[str]]:
        metadata = self.types.get(type_name)
        return list(metadata.all_properties) if metadata else None

    def get_non_relationship_properties_for_type(self, type_name: str) -> Optional[List[str]]:
        metadata = self.types.get(type_name)
        return list(metadata.non_relationship_properties) if metadata else None

    def get_all_string_properties_for_type(self, type_name: str) -> Optional[List[str]]:
        metadata = self.types.get(type_name)
        return list(metadata.string_properties) if metadata else None

    def get_paged_relationship_properties_for_type(self, type_name: str) -> Optional[List[str]]:
        metadata = self.types.get(type_name)
        return list(metadata.paged_relationship_properties) if metadata else None

    def _on_type_cached(self, type_name: str, details: TypeDetails, metadata: TypeMetadata) -> None:
        model = self.models.resolve(type_name)
        if model is None and self.generate_models:
            try:
                model = self.models.adopt(type_name, self.models.generate(type_name, details.view_properties))
            except (TypeError, ValueError, NameError) as e:
                raise SchemaResolutionError(f"Unable to generate a model for {type_name}: {e}", type_name=type_name) from e
        if model is None:
            logger.warning("No model registered for IGC type %s; its properties cannot be accessed by name", type_name)
            return
        for property_name in metadata.all_properties:
            self.properties.prime_reader(type_name, property_name, model)
        if metadata.has_modification_details:
            self.properties.prime_writer(type_name, MOD_CREATED_ON, model)

    # --- Models ------------------------------------------------------------------

    def register_model(self, model: Type[Reference]) -> Type[Reference]:
        return self.models.register(model)

    def get_model_for_type(self, type_name: Optional[str]) -> Optional[Type[Reference]]:
        return self.models.resolve(type_name)

    def read_json_into_model(self, body: str) -> Optional[Reference]:
        try:
            return self.models.build(decode_json(body))
        except SerializationError as e:
            logger.error("Unable to translate JSON into a model: %s", e)
            return None

    def read_json_into_item_list(self, body: str) -> Optional[ItemList]:
        try:
            return self.models.build_item_list(decode_json(body))
        except SerializationError as e:
            logger.error("Unable to translate JSON into an ItemList: %s", e)
            return None

    def get_value_as_json(self, asset: Reference) -> str:
        return asset.model_dump_json(by_alias=True, exclude_none=True)

    # --- Assets ------------------------------------------------------------------

    def get_asset_by_id(self, rid: str) -> Optional[Reference]:
        """
        Retrieve all information about an asset. This can retrieve far more than
        is needed; see get_asset_ref_by_id and get_asset_with_subset_of_properties.
        """
        body = self.make_request(f"{EP_ASSET}/{rid}", "GET")
        if body is None:
            return None
        return self.models.build(decode_json(body))

    def get_asset_ref_by_id(self, rid: str) -> Optional[Reference]:
        """Only the minimal identifying properties of an asset: the cheapest existence check."""
        search = Search(CATCHALL_TYPE, conditions=id_equals(rid))
        for asset_type in ID_LOOKUP_TYPES:
            search.add_type(asset_type)
        search.set_page_size(1)
        results = self.search(search)
        if results.paging.num_total > 1:
            logger.warning("Found multiple assets for RID %s, taking only the first.", rid)
        return results.first()

    def get_asset_with_subset_of_properties(
        self,
        rid: str,
        asset_type: str,
        properties: Sequence[str],
        page_size: Optional[int] = None,
        sorting: Optional[SearchSorting] = None,
    ) -> Optional[Reference]:
        logger.debug("Retrieving asset %s with subset of details: %s", rid, properties)
        search = Search(asset_type_for_search(asset_type), properties, id_equals(rid))
        if page_size is None:
            page_size = self.default_page_size
        if page_size > 0:
            search.set_page_size(page_size)
        if sorting is not None:
            search.add_sorting_criteria(sorting)
        return self.search(search).first()

    def search_json(self, search: Search) -> Optional[str]:
        return self.make_request(EP_SEARCH, "POST", JSON, search.to_json())

    def search(self, search: Search) -> ItemList:
        """First page of results; follow it with get_all_pages for the rest."""
        return self.models.build_item_list(decode_json(self.search_json(search)))

    def create(self, payload: Payload) -> Optional[str]:
        try:
            return self.make_create_request(EP_ASSET, "POST", JSON, _as_json(payload))
        except TransportError as e:
            logger.error("Unable to create asset: %s", e)
            return None

    def update(self, rid: str, payload: Payload) -> bool:
        try:
            result = self.make_request(f"{EP_ASSET}/{rid}", "PUT", JSON, _as_json(payload))
        except TransportError as e:
            logger.error("Unable to update asset %s: %s", rid, e)
            return False
        return result is not None

    def delete(self, rid: str) -> bool:
        try:
            result = self.make_request(f"{EP_ASSET}/{rid}", "DELETE")
        except TransportError as e:
            logger.error("Unable to delete asset %s: %s", rid, e)
            return False
        if result is not None:
            logger.error("Unable to delete asset %s: %s", rid, result)
        return result is None

    # --- Paging ------------------------------------------------------------------

    def get_next_page(self, paging: Optional[Paging]) -> ItemList:
        return self.pages.next_page(paging)

    def get_all_pages(self, items: Optional[Sequence[Reference]], paging: Optional[Paging]) -> List[Reference]:
        return self.pages.collect_all_pages(items, paging)

    # --- Properties --------------------------------------------------------------

    def get_property_by_name(self, obj: Optional[Reference], property_name: str) -> Any:
        return self.properties.read(obj, property_name)

    def set_property_by_name(self, obj: Optional[Reference], property_name: str, value: Any) -> bool:
        return self.properties.write(obj, property_name, value)

    def populate_modification_details(self, obj: Optional[Reference]) -> bool:
        """
        Fill in created/modified by/on on ``obj`` in place. No action when the
        type does not track them or they are already present. Returns whether
        the details are (now) populated.
        """
        if obj is None or not self.has_modification_details(obj.type):
            return True
        if self.get_property_by_name(obj, MOD_CREATED_BY) is not None:
            return True

        logger.debug("Populating modification details that were missing...")
        search = Search(obj.type, MODIFICATION_PROPERTIES, id_equals(obj.id))
        search.set_page_size(2)
        found = self.search(search).first()
        if found is None:
            return False
        self._copy_modification_details(found, obj)
        return True

    def populate_context(self, obj: Optional[Reference]) -> bool:
        """
        Fill in ``obj.context`` in place (and modification details, where the
        type tracks them). No action when the context is already present.
        """
        if obj is None or obj.context:
            return True

        logger.debug("Context is empty, populating...")
        has_modification_details = self.has_modification_details(obj.type)
        search = Search(obj.type, conditions=id_equals(obj.id))
        if has_modification_details:
            search.add_properties(MODIFICATION_PROPERTIES)
        search.set_page_size(2)
        found = self.search(search).first()
        if found is None:
            return False
        obj.context = found.context
        if has_modification_details:
            self._copy_modification_details(found, obj)
        return True

    def _copy_modification_details(self, source: Reference, target: Reference) -> None:
        for property_name in MODIFICATION_PROPERTIES:
            self.set_property_by_name(target, property_name, self.get_property_by_name(source, property_name))

    # --- OpenIGC bundles ---------------------------------------------------------

    def get_open_igc_bundles(self) -> List[str]:
        body = self.make_request(EP_BUNDLES, "GET")
        try:
            payload = decode_json(body)
        except SerializationError as e:
            logger.error("Unable to parse bundle response: %s", e)
            return []
        return [str(b) for b in payload] if isinstance(payload, list) else []

    def upsert_open_igc_bundle(self, name: str, path: Union[str, Path]) -> bool:
        """Upload a bundle zip, creating the bundle (POST) or replacing it (PUT)."""
        method = "PUT" if name in self.get_open_igc_bundles() else "POST"
        return self.upload_file(EP_BUNDLES, method, path)

    def upsert_open_igc_asset(self, asset_xml: str) -> Optional[str]:
        return self.make_request(EP_BUNDLE_ASSETS, "POST", XML, asset_xml)

    def delete_open_igc_asset(self, asset_xml: str) -> bool:
        return self.make_request(EP_BUNDLE_ASSETS, "DELETE", XML, asset_xml) is None
