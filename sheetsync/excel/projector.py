"""Projection between domain objects and worksheet rows.

``to_rows`` flattens a homogeneous collection into a header row followed by
one text row per object. ``from_rows`` rebuilds objects from such a table,
either into a concrete ``DomainObject`` shape or into ``GenericRecord``s.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Final

from sheetsync.excel.exceptions import InputError
from sheetsync.excel.fields import cell_text, field_table, property_dictionary
from sheetsync.excel.objects import DomainObject, GenericRecord, TableRow

logger = logging.getLogger(__name__)

# Structural fields left out of auto-derived columns unless asked for
IGNORED_PROPERTIES: Final[frozenset[str]] = frozenset(
    {"tags", "custom_data", "fragments"}
)


@dataclass(frozen=True)
class RowOutcome:
    """Result of rebuilding one data row.

    ``row_number`` counts table rows from 1, so the first data row is 2.
    """

    row_number: int
    item: DomainObject | None = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.item is not None


@dataclass
class ReadBatch:
    """Rebuilt objects plus the rows that had to be skipped."""

    outcomes: list[RowOutcome] = field(default_factory=list)

    @classmethod
    def of(cls, items: Sequence[DomainObject]) -> "ReadBatch":
        return cls([RowOutcome(row_number=i, item=item) for i, item in enumerate(items, 1)])

    @property
    def objects(self) -> list[DomainObject]:
        return [o.item for o in self.outcomes if o.ok]

    @property
    def skipped(self) -> list[RowOutcome]:
        return [o for o in self.outcomes if not o.ok]


def single_shape(objects: Sequence[Any]) -> type:
    """Return the one runtime type shared by all objects.

    Raises:
        InputError: If there are no objects or more than one type.
    """
    if not objects:
        raise InputError("No objects were provided for the push.")
    shapes = list(dict.fromkeys(type(obj) for obj in objects))
    if len(shapes) != 1:
        names = ", ".join(s.__qualname__ for s in shapes)
        raise InputError(
            "Only objects of a single type can be pushed to a table. "
            f"Received objects of the following types: {names}"
        )
    return shapes[0]


def to_rows(
    objects: Sequence[Any],
    properties: Sequence[str] | None = None,
) -> list[TableRow]:
    """Flatten objects into a header row plus one row per object.

    Args:
        objects: Objects of a single runtime type.
        properties: Column order to export. When empty, the union of all
            property names in first-seen order is used, minus
            ``IGNORED_PROPERTIES``.

    Returns:
        Rows of equal length; missing values are ``""``.
    """
    items = [obj for obj in objects if obj is not None]
    single_shape(items)

    content = [property_dictionary(obj) for obj in items]
    if not properties:
        names = dict.fromkeys(key for values in content for key in values)
        properties = [name for name in names if name not in IGNORED_PROPERTIES]
    columns = list(properties)

    rows = [TableRow(content=list(columns))]
    for values in content:
        rows.append(TableRow(content=[
            cell_text(values[column]) if column in values else ""
            for column in columns
        ]))
    return rows


def _cells(row: TableRow | Sequence[Any]) -> list[Any]:
    if isinstance(row, TableRow):
        return list(row.content)
    return list(row or [])


def _header(row: TableRow | Sequence[Any]) -> list[str]:
    return ["" if cell is None else str(cell).strip() for cell in _cells(row)]


def from_rows(
    rows: Sequence[TableRow | Sequence[Any]],
    shape: type | None = None,
) -> ReadBatch:
    """Rebuild objects from a header row followed by data rows.

    Columns pair with header names positionally up to the shorter of the
    two; extra cells or extra header names are ignored. Columns with an
    empty header are skipped, and empty cells (None or "") are not
    assigned to typed shapes so field defaults apply.

    Raises:
        InputError: If ``shape`` is not a ``DomainObject`` subclass.
    """
    if len(rows) < 2:
        return ReadBatch()

    if shape is None or shape is GenericRecord:
        return _generic_records(rows)

    if not (isinstance(shape, type) and issubclass(shape, DomainObject)):
        raise InputError(f"The type {shape!r} is not a DomainObject")

    header = _header(rows[0])
    descriptors = field_table(shape)
    batch = ReadBatch()

    for row_number, row in enumerate(rows[1:], start=2):
        try:
            item = shape()
            for key, value in zip(header, _cells(row)):
                if not key or value is None or value == "":
                    continue
                descriptor = descriptors.get(key)
                if descriptor is None:
                    item.custom_data[key] = value
                else:
                    descriptor.setter(item, value)
        except (TypeError, ValueError) as e:
            reason = f"Row {row_number} could not be converted to {shape.__name__}: {e}"
            logger.debug(reason)
            batch.outcomes.append(RowOutcome(row_number=row_number, reason=reason))
            continue
        batch.outcomes.append(RowOutcome(row_number=row_number, item=item))

    return batch


def _generic_records(rows: Sequence[TableRow | Sequence[Any]]) -> ReadBatch:
    header = _header(rows[0])
    batch = ReadBatch()

    for row_number, row in enumerate(rows[1:], start=2):
        values = {key: value for key, value in zip(header, _cells(row)) if key}
        try:
            record = GenericRecord.from_mapping(values)
        except (TypeError, ValueError) as e:
            reason = f"Row {row_number} could not be converted to GenericRecord: {e}"
            logger.debug(reason)
            batch.outcomes.append(RowOutcome(row_number=row_number, reason=reason))
            continue
        batch.outcomes.append(RowOutcome(row_number=row_number, item=record))

    return batch
