"""
Reference, paging and item-list shapes returned by the IGC REST API.

Every asset the API returns is at least a ``Reference``: an id, a type, a
display name, a URL and (when requested) its ``_context`` path. Any further
properties requested on a search are kept as extra attributes, or as declared
fields on a registered / generated subclass.
"""

from typing import ClassVar, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Reference(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow", protected_namespaces=())

    # IGC type name handled by a subclass; None for the generic reference
    type_name: ClassVar[Optional[str]] = None

    id: Optional[str] = Field(default=None, alias="_id")
    type: Optional[str] = Field(default=None, alias="_type")
    name: Optional[str] = Field(default=None, alias="_name")
    url: Optional[str] = Field(default=None, alias="_url")
    context: Optional[List["Reference"]] = Field(default=None, alias="_context")

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class Paging(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    num_total: int = Field(default=0, alias="numTotal")
    page_size: Optional[int] = Field(default=None, alias="pageSize")
    next_page_url: Optional[str] = Field(default=None, alias="next")
    previous_page_url: Optional[str] = Field(default=None, alias="previous")
    begin_index: Optional[int] = Field(default=None, alias="begin")
    end_index: Optional[int] = Field(default=None, alias="end")

    def has_next_page(self) -> bool:
        # The API renders a missing link as the literal string "null"
        return bool(self.next_page_url) and self.next_page_url != "null"


class ItemList(BaseModel):
    items: List[Reference] = Field(default_factory=list)
    paging: Paging = Field(default_factory=Paging)

    def first(self) -> Optional[Reference]:
        return self.items[0] if self.items else None
