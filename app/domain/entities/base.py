"""Shared behaviour for entities persisted as store documents."""
from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, Field

DocT = TypeVar("DocT", bound="DocumentModel")


class DocumentModel(BaseModel):
    """Base model with store round-trip helpers."""

    id: str | None = Field(None, description="Document id (assigned by the store)")
    version: int | None = Field(None, description="Store version for conditional writes")

    class Config:
        """Pydantic config."""

        from_attributes = True
        use_enum_values = True
        populate_by_name = True

    def to_document(self) -> dict[str, Any]:
        """JSON-safe dict for the store; id and version are managed by the store."""
        return self.model_dump(mode="json", exclude={"id", "version"})

    @classmethod
    def from_document(cls: type[DocT], document: dict[str, Any]) -> DocT:
        return cls.model_validate(document)
