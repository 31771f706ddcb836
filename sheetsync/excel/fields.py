"""Per-shape field tables.

A field table maps property names to getter/setter pairs. It is built once
per type and cached, so projecting many objects of one shape only inspects
the class a single time.
"""

from __future__ import annotations

import dataclasses
import enum
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from pydantic import BaseModel

from sheetsync.excel.objects import DomainObject

_MISSING = object()


@dataclass(frozen=True)
class FieldDescriptor:
    """Accessor and mutator for one named property."""

    name: str
    getter: Callable[[Any], Any]
    setter: Callable[[Any, Any], None]


def _descriptor(name: str) -> FieldDescriptor:
    return FieldDescriptor(
        name=name,
        getter=lambda obj: getattr(obj, name, _MISSING),
        setter=lambda obj, value: setattr(obj, name, value),
    )


def _class_field_names(shape: type) -> list[str]:
    if issubclass(shape, BaseModel):
        return list(shape.model_fields)
    if dataclasses.is_dataclass(shape):
        return [f.name for f in dataclasses.fields(shape)]

    names: list[str] = []
    for klass in reversed(shape.__mro__):
        for name in getattr(klass, "__annotations__", {}):
            if not name.startswith("_") and name not in names:
                names.append(name)
        for name, member in vars(klass).items():
            if isinstance(member, property) and not name.startswith("_") and name not in names:
                names.append(name)
    return names


@lru_cache(maxsize=None)
def field_table(shape: type) -> dict[str, FieldDescriptor]:
    """Return the ordered name -> descriptor table for a class."""
    return {name: _descriptor(name) for name in _class_field_names(shape)}


def property_dictionary(obj: Any) -> dict[str, Any]:
    """Flatten an object into an ordered property-name -> value mapping.

    Mappings contribute their keys. Entries of a domain object's
    ``custom_data`` are flattened in after its declared fields, without
    overriding them. Plain objects without declared fields fall back to
    their public instance attributes.
    """
    if isinstance(obj, Mapping):
        return {str(key): value for key, value in obj.items()}

    table = field_table(type(obj))
    values: dict[str, Any] = {}
    for name, descriptor in table.items():
        value = descriptor.getter(obj)
        if value is not _MISSING:
            values[name] = value

    if not table and hasattr(obj, "__dict__"):
        values = {k: v for k, v in vars(obj).items() if not k.startswith("_")}

    if isinstance(obj, DomainObject):
        for key, value in obj.custom_data.items():
            values.setdefault(str(key), value)
    return values


def cell_text(value: Any) -> str:
    """Render a property value as worksheet text; None becomes ``""``."""
    if value is None:
        return ""
    if isinstance(value, enum.Enum):
        return str(value.value)
    return str(value)
