"""
Minimal builder for the JSON body posted to the IGC ``/search`` endpoint.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union


@dataclass
class SearchCondition:
    property: str
    operator: str
    value: Any = None
    negated: bool = False

    def to_query(self) -> Dict[str, Any]:
        query: Dict[str, Any] = {"property": self.property, "operator": self.operator}
        if self.value is not None:
            query["value"] = self.value
        if self.negated:
            query["negated"] = True
        return query


@dataclass
class SearchConditionSet:
    conditions: List[Union[SearchCondition, "SearchConditionSet"]] = field(default_factory=list)
    match_any: bool = False

    @classmethod
    def of(cls, *conditions: Union[SearchCondition, "SearchConditionSet"]) -> "SearchConditionSet":
        return cls(conditions=list(conditions))

    def add_condition(self, condition: Union[SearchCondition, "SearchConditionSet"]) -> None:
        self.conditions.append(condition)

    def to_query(self) -> Dict[str, Any]:
        return {
            "operator": "or" if self.match_any else "and",
            "conditions": [c.to_query() for c in self.conditions],
        }


@dataclass
class SearchSorting:
    property: str
    ascending: bool = True

    def to_query(self) -> Dict[str, Any]:
        return {"property": self.property, "ascending": self.ascending}


def id_equals(rid: str) -> SearchConditionSet:
    return SearchConditionSet.of(SearchCondition("_id", "=", rid))


class Search:
    def __init__(
        self,
        asset_type: str,
        properties: Optional[Iterable[str]] = None,
        conditions: Optional[SearchConditionSet] = None,
    ) -> None:
        self.types: List[str] = [asset_type]
        self.properties: List[str] = []
        self.conditions = conditions
        self.sorting: List[SearchSorting] = []
        self.page_size: Optional[int] = None
        self.dev_glossary = False
        if properties:
            self.add_properties(properties)

    def add_type(self, asset_type: str) -> "Search":
        if asset_type not in self.types:
            self.types.append(asset_type)
        return self

    def add_properties(self, properties: Iterable[str]) -> "Search":
        for prop in properties:
            if prop not in self.properties:
                self.properties.append(prop)
        return self

    def add_sorting_criteria(self, sorting: SearchSorting) -> "Search":
        self.sorting.append(sorting)
        return self

    def set_page_size(self, page_size: int) -> "Search":
        self.page_size = page_size
        return self

    def set_dev_glossary(self, enabled: bool) -> "Search":
        self.dev_glossary = enabled
        return self

    def to_query(self) -> Dict[str, Any]:
        query: Dict[str, Any] = {"types": list(self.types)}
        if self.properties:
            query["properties"] = list(self.properties)
        if self.conditions is not None and self.conditions.conditions:
            query["where"] = self.conditions.to_query()
        if self.sorting:
            query["sorts"] = [s.to_query() for s in self.sorting]
        if self.page_size is not None:
            query["pageSize"] = self.page_size
        if self.dev_glossary:
            query["workflowMode"] = "draft"
        return query

    def to_json(self) -> str:
        return json.dumps(self.to_query())
