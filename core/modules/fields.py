"""Field schema and the per-module field catalog."""
from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from core.errors import DuplicateFieldError
from core.filters import FIELDS, FilterChain

if TYPE_CHECKING:
    from .definition import ModuleDefinition


class FieldType(str, Enum):
    CHECKBOX = "checkbox"
    TEXT = "text"
    TEXTAREA = "textarea"
    URL = "url"
    NUMBER = "number"
    SELECT = "select"


class Field(BaseModel):
    key: str
    type: FieldType = FieldType.TEXT
    label: str = ""
    # None means "no declared default"
    default: Optional[Any] = None
    active: bool = True

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("key")
    @classmethod
    def _key_not_empty(cls, v: str) -> str:  # noqa: D401
        if not v.strip():
            raise ValueError("key cannot be empty")
        return v

    @property
    def is_checkbox(self) -> bool:
        return self.type == FieldType.CHECKBOX


class FieldCatalog:
    """Module field lists composed with the ``fields`` filter point."""

    def __init__(self, filters: FilterChain) -> None:
        self._filters = filters

    def get_fields(self, definition: "ModuleDefinition") -> list[Field]:
        base = list(definition.fields()) if definition.fields else []
        fields = list(
            self._filters.apply(FIELDS, base, scope=definition.id)
        )
        seen: set[str] = set()
        for f in fields:
            if f.key in seen:
                raise DuplicateFieldError(
                    f"Module '{definition.id}' declares field "
                    f"'{f.key}' more than once"
                )
            seen.add(f.key)
        return fields

    def get_field(
        self, definition: "ModuleDefinition", key: str
    ) -> Field | None:
        for f in self.get_fields(definition):
            if f.key == key:
                return f
        return None

    def get_checkbox_count(self, definition: "ModuleDefinition") -> int:
        return sum(
            1 for f in self.get_fields(definition) if f.is_checkbox and f.active
        )


__all__ = ["Field", "FieldType", "FieldCatalog"]
