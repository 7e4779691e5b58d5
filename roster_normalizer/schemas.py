from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field


class DocumentModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class Cost(DocumentModel):
    name: str
    type_id: str = Field(..., alias="typeId")
    value: float = 0.0


class Category(DocumentModel):
    name: str
    id: str | None = None
    entry_id: str | None = Field(None, alias="entryId")
    primary: bool = False


class Rule(DocumentModel):
    name: str
    id: str | None = None
    hidden: bool = False


class Characteristic(DocumentModel):
    model_config = ConfigDict(
        populate_by_name=True, frozen=True, coerce_numbers_to_str=True
    )

    name: str
    type_id: str | None = Field(None, alias="typeId")
    value: str | None = None


class Profile(DocumentModel):
    name: str
    type_name: str = Field(..., alias="typeName")
    id: str | None = None
    type_id: str | None = Field(None, alias="typeId")
    hidden: bool = False
    characteristics: list[Characteristic] = Field(default_factory=list)


class Selection(DocumentModel):
    name: str
    type: str
    id: str | None = None
    entry_id: str | None = Field(None, alias="entryId")
    number: int = Field(1, ge=0)
    categories: list[Category] = Field(default_factory=list)
    costs: list[Cost] = Field(default_factory=list)
    profiles: list[Profile] = Field(default_factory=list)
    rules: list[Rule] = Field(default_factory=list)
    selections: list[Selection] = Field(default_factory=list)


Selection.model_rebuild()


class Force(DocumentModel):
    name: str
    id: str | None = None
    entry_id: str | None = Field(None, alias="entryId")
    catalogue_name: str | None = Field(None, alias="catalogueName")
    selections: list[Selection] = Field(default_factory=list)
    rules: list[Rule] = Field(default_factory=list)


class Roster(DocumentModel):
    name: str = ""
    id: str | None = None
    game_system_name: str | None = Field(None, alias="gameSystemName")
    costs: list[Cost] = Field(default_factory=list)
    forces: list[Force] = Field(default_factory=list)

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "Roster":
        return cls.model_validate(document)
