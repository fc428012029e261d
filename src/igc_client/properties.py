"""
Dynamic property access by name.

A reader / writer is built once per ``(type name, property name)`` from the
model class resolved for the type and then reused for the life of the
client. When no model can be resolved, or the property is unknown for the
type, no accessor exists: callers treat that as "property not applicable".
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, Iterable, Optional, Tuple, Type

from igc_client.contracts.references import Reference

logger = logging.getLogger(__name__)

PropertyKey = Tuple[str, str]


def field_attribute(model: Type[Reference], property_name: str) -> Optional[str]:
    """The field on ``model`` holding ``property_name`` (by name or by alias), if declared."""
    fields = model.model_fields
    for field_name, info in fields.items():
        if info.alias == property_name:
            return field_name
    info = fields.get(property_name)
    # A field whose alias differs (e.g. name <- _name) holds another property
    if info is not None and info.alias in (None, property_name):
        return property_name
    return None


class _PropertyBinding:
    def __init__(self, model: Type[Reference], property_name: str, attribute: str) -> None:
        self.model = model
        self.property_name = property_name
        self.attribute = attribute

    def _declared_on(self, obj: Reference) -> bool:
        return self.attribute in getattr(type(obj), "model_fields", {})

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.model.__name__}.{self.attribute} <- {self.property_name!r})"


class PropertyReader(_PropertyBinding):
    def get(self, obj: Reference) -> Any:
        if self._declared_on(obj):
            return getattr(obj, self.attribute)
        extra = obj.model_extra or {}
        return extra.get(self.property_name)


class PropertyWriter(_PropertyBinding):
    def set(self, obj: Reference, value: Any) -> None:
        if self._declared_on(obj):
            setattr(obj, self.attribute, value)
        else:
            obj.__pydantic_extra__[self.property_name] = value


class PropertyRegistry:
    def __init__(
        self,
        resolve_model: Callable[[Optional[str]], Optional[Type[Reference]]],
        known_properties: Callable[[Optional[str]], Optional[Iterable[str]]],
    ) -> None:
        self.resolve_model = resolve_model
        # Resolving the known properties of a type is what triggers its schema fetch
        self.known_properties = known_properties
        self._readers: Dict[PropertyKey, PropertyReader] = {}
        self._writers: Dict[PropertyKey, PropertyWriter] = {}
        self._lock = threading.RLock()

    def reader(self, type_name: Optional[str], property_name: str) -> Optional[PropertyReader]:
        return self._lookup(self._readers, PropertyReader, type_name, property_name)

    def writer(self, type_name: Optional[str], property_name: str) -> Optional[PropertyWriter]:
        return self._lookup(self._writers, PropertyWriter, type_name, property_name)

    def prime_reader(self, type_name: str, property_name: str, model: Type[Reference]) -> PropertyReader:
        return self._prime(self._readers, PropertyReader, type_name, property_name, model)

    def prime_writer(self, type_name: str, property_name: str, model: Type[Reference]) -> PropertyWriter:
        return self._prime(self._writers, PropertyWriter, type_name, property_name, model)

    def read(self, obj: Optional[Reference], property_name: str) -> Any:
        if obj is None:
            return None
        reader = self.reader(obj.type, property_name)
        if reader is None:
            return None
        return reader.get(obj)

    def write(self, obj: Optional[Reference], property_name: str, value: Any) -> bool:
        if obj is None:
            return False
        writer = self.writer(obj.type, property_name)
        if writer is None:
            return False
        writer.set(obj, value)
        return True

    def cached_keys(self) -> Tuple[Tuple[PropertyKey, ...], Tuple[PropertyKey, ...]]:
        with self._lock:
            return tuple(self._readers), tuple(self._writers)

    def _prime(self, cache, factory, type_name, property_name, model):
        key = (type_name, property_name)
        with self._lock:
            existing = cache.get(key)
            if existing is None:
                attribute = field_attribute(model, property_name) or property_name
                existing = factory(model, property_name, attribute)
                cache[key] = existing
            return existing

    def _lookup(self, cache, factory, type_name, property_name):
        if not type_name:
            return None
        key = (type_name, property_name)
        with self._lock:
            existing = cache.get(key)
        if existing is not None:
            return existing

        # Outside the lock: this may fetch the type's schema, which primes accessors
        known = self.known_properties(type_name)
        model = self.resolve_model(type_name)
        if model is None:
            logger.debug("No model available for IGC type %s; %s is not accessible", type_name, property_name)
            return None
        attribute = field_attribute(model, property_name)
        if attribute is None:
            if property_name not in (known or ()):
                logger.debug("Property %s is not known for IGC type %s", property_name, type_name)
                return None
            attribute = property_name
        with self._lock:
            return cache.setdefault(key, factory(model, property_name, attribute))
