"""Domain objects exchanged with worksheets.

Every shape that can be read back from a worksheet derives from
``DomainObject``. Subclasses register themselves by class name so the HTTP
layer can resolve a shape from a request body.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

_SHAPES: dict[str, type["DomainObject"]] = {}


class DomainObject(BaseModel):
    """Base for objects synchronized with worksheets.

    ``tags``, ``custom_data`` and ``fragments`` are structural fields; they
    are left out of auto-derived columns. ``custom_data`` also holds any
    column that has no matching field on the shape.
    """

    model_config = ConfigDict(
        validate_assignment=True,
        coerce_numbers_to_str=True,
        arbitrary_types_allowed=True,
    )

    name: str = ""
    tags: set[str] = Field(default_factory=set)
    custom_data: dict[str, Any] = Field(default_factory=dict)
    fragments: list[Any] = Field(default_factory=list)

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)
        _SHAPES[cls.__name__] = cls


class GenericRecord(DomainObject):
    """Untyped record: known fields plus an ordered overflow bag."""

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "GenericRecord":
        """Build a record, routing keys that name a field to that field.

        Every other key lands in ``custom_data`` in the order given, as does
        a value the field rejects (a ``tags`` column holding plain text).
        """
        record = cls()
        bag: dict[str, Any] = {}
        for key, value in values.items():
            if key in cls.model_fields and key != "custom_data":
                if value is None:
                    continue
                try:
                    setattr(record, key, value)
                except ValidationError:
                    bag[key] = value
            else:
                bag[key] = value
        record.custom_data = bag
        return record


class TableRow(DomainObject):
    """One worksheet row as an ordered list of raw cell values."""

    content: list[Any] = Field(default_factory=list)


class CellContents(DomainObject):
    """Full description of a cell, keeping formulas apart from values."""

    address: str
    value: Any = None
    formula: str | None = None
    data_type: str = "empty"
    comment: str | None = None
    hyperlink: str | None = None


def get_shape(name: str) -> type[DomainObject] | None:
    """Look up a registered shape by class name."""
    return _SHAPES.get(name)


def registered_shapes() -> list[str]:
    return sorted(_SHAPES)
