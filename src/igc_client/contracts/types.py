"""
Type introspection shapes returned by ``/types`` and ``/types/<name>``.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TypeHeader(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    name: Optional[str] = Field(default=None, alias="_name")
    url: Optional[str] = Field(default=None, alias="_url")


class TypeReference(BaseModel):
    """The declared type of a property: a primitive kind, or another asset type when ``url`` is set."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(default=None, alias="_id")
    name: Optional[str] = Field(default=None, alias="_name")
    url: Optional[str] = Field(default=None, alias="_url")

    @property
    def kind(self) -> Optional[str]:
        return self.name or self.id

    @property
    def is_relationship(self) -> bool:
        return self.url is not None


class TypeProperty(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    display_name: Optional[str] = Field(default=None, alias="displayName")
    type: TypeReference = Field(default_factory=TypeReference)
    max_cardinality: int = Field(default=1, alias="maxCardinality")
    min_cardinality: int = Field(default=0, alias="minCardinality")


class TypeInfo(BaseModel):
    properties: List[TypeProperty] = Field(default_factory=list)


class TypeDetails(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(default=None, alias="_id")
    name: Optional[str] = Field(default=None, alias="_name")
    url: Optional[str] = Field(default=None, alias="_url")
    view_info: Optional[TypeInfo] = Field(default=None, alias="viewInfo")
    create_info: Optional[TypeInfo] = Field(default=None, alias="createInfo")
    edit_info: Optional[TypeInfo] = Field(default=None, alias="editInfo")

    @property
    def view_properties(self) -> List[TypeProperty]:
        return self.view_info.properties if self.view_info else []

    @property
    def create_properties(self) -> List[TypeProperty]:
        return self.create_info.properties if self.create_info else []
