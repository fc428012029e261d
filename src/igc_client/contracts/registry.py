"""
Explicit table of IGC type name -> pydantic model class.

Models are either registered up-front (a ``Reference`` subclass declaring a
``type_name``) or generated on first use from the type's cached view
properties. Payloads are built into the model registered for their ``_type``,
falling back to the generic ``Reference``.
"""

from __future__ import annotations

import json
import keyword
import logging
import re
import threading
from typing import Any, Dict, Iterable, Optional, Type

from pydantic import BaseModel, Field, ValidationError, create_model

from igc_client.constants import PROPERTIES_TO_IGNORE
from igc_client.contracts.references import ItemList, Paging, Reference
from igc_client.contracts.types import TypeProperty
from igc_client.errors import SerializationError

logger = logging.getLogger(__name__)


def decode_json(body: Optional[str]) -> Any:
    if body is None:
        raise SerializationError("Empty response body", payload=body)
    try:
        return json.loads(body)
    except ValueError as e:
        raise SerializationError(f"Response body is not valid JSON: {e}", payload=body) from e


def class_name_for_type(type_name: str) -> str:
    parts = [p for p in re.split(r"[^0-9a-zA-Z]+", type_name) if p]
    name = "".join(p[:1].upper() + p[1:] for p in parts) or "Asset"
    return name if name[0].isalpha() else f"T{name}"


def attribute_name_for_property(property_name: str) -> str:
    """Python attribute under which a property is stored on a generated model."""
    attribute = re.sub(r"\W", "_", property_name).lstrip("_") or "property"
    if attribute[0].isdigit():
        attribute = f"p_{attribute}"
    if (
        keyword.iskeyword(attribute)
        or hasattr(BaseModel, attribute)
        or attribute in Reference.model_fields
        or attribute.startswith("model_")
    ):
        attribute = f"{attribute}_"
    return attribute


def _annotation_for(prop: TypeProperty) -> Any:
    if prop.type.is_relationship and prop.max_cardinality < 0:
        return Optional[ItemList]
    return Optional[Any]


class ModelRegistry:
    def __init__(self) -> None:
        self._models: Dict[str, Type[Reference]] = {}
        self._lock = threading.RLock()

    def register(self, model: Type[Reference]) -> Type[Reference]:
        type_name = getattr(model, "type_name", None)
        if not type_name:
            logger.error("Unable to find type_name to identify the IGC type of model: %s", model.__name__)
            raise ValueError(f"{model.__name__} does not declare a type_name")
        with self._lock:
            self._models[type_name] = model
        logger.info("Registered IGC type %s to be handled by model: %s", type_name, model.__name__)
        return model

    def resolve(self, type_name: Optional[str]) -> Optional[Type[Reference]]:
        if not type_name:
            return None
        with self._lock:
            return self._models.get(type_name)

    def is_registered(self, type_name: str) -> bool:
        return self.resolve(type_name) is not None

    def generate(self, type_name: str, properties: Iterable[TypeProperty]) -> Type[Reference]:
        """Build (but do not register) a model with one optional field per view property."""
        fields: Dict[str, Any] = {}
        for prop in properties:
            if prop.name in PROPERTIES_TO_IGNORE:
                continue
            attribute = attribute_name_for_property(prop.name)
            if attribute == prop.name:
                fields[attribute] = (_annotation_for(prop), None)
            else:
                fields[attribute] = (_annotation_for(prop), Field(default=None, alias=prop.name))
        return create_model(class_name_for_type(type_name), __base__=Reference, **fields)

    def adopt(self, type_name: str, model: Type[Reference]) -> Type[Reference]:
        """Register a generated model unless a model is already registered for the type."""
        with self._lock:
            return self._models.setdefault(type_name, model)

    def build(self, payload: Any) -> Reference:
        if not isinstance(payload, dict):
            raise SerializationError("Expected a JSON object for an asset", payload=payload)
        model = self.resolve(payload.get("_type")) or Reference
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise SerializationError(f"Unable to translate JSON into {model.__name__}: {e}", payload=payload) from e

    def build_item_list(self, payload: Any) -> ItemList:
        if not isinstance(payload, dict):
            raise SerializationError("Expected a JSON object for an item list", payload=payload)
        items = [self.build(item) for item in payload.get("items") or []]
        try:
            paging = Paging.model_validate(payload.get("paging") or {})
        except ValidationError as e:
            raise SerializationError(f"Unable to translate paging details: {e}", payload=payload) from e
        return ItemList(items=items, paging=paging)
