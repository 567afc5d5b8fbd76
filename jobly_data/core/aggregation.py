"""Fold flat one-to-many join rows back into nested parent records."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from .errors import NotFoundError
from .types import Record, RowMapping

ChildFields = str | Mapping[str, str]


def aggregate(
    rows: Sequence[RowMapping],
    parent_key: str,
    *,
    parent_fields: Sequence[str],
    child_fields: ChildFields,
    children: str = "children",
    presence: Optional[str] = None,
) -> List[Record]:
    """Group contiguous rows by `parent_key` and nest their child columns.

    Rows must already be ordered so that rows sharing a parent are adjacent.
    A row whose `presence` column is null (outer join without a match) adds
    no child, so such a parent is emitted with an empty child list.

    Args:
        rows: Flat join rows in parent order.
        parent_key: Row key identifying the parent.
        parent_fields: Row keys copied onto each parent record.
        child_fields: A single row key (children are bare values) or a
            mapping of output field to row key (children are dicts).
        children: Name of the nested child list on each parent.
        presence: Row key whose non-null value marks a real child. Defaults
            to the first child row key.

    Returns:
        One record per parent. Every record owns its own child list.
        Empty `rows` give an empty list; `aggregate_one` is the variant that
        raises `NotFoundError` for a missing parent.
    """

    presence_key = presence or _first_child_key(child_fields)
    records: List[Record] = []
    pending: List[Any] = []

    for index, row in enumerate(rows):
        if row[presence_key] is not None:
            pending.append(_child(row, child_fields))

        is_last = index + 1 == len(rows)
        if is_last or rows[index + 1][parent_key] != row[parent_key]:
            record: Dict[str, Any] = {name: row[name] for name in parent_fields}
            record[children] = list(pending)
            records.append(record)
            pending.clear()

    return records


def aggregate_one(
    rows: Sequence[RowMapping],
    parent_key: str,
    *,
    parent_fields: Sequence[str],
    child_fields: ChildFields,
    children: str = "children",
    presence: Optional[str] = None,
    not_found: str = "No matching record",
) -> Record:
    """Aggregate rows known to belong to a single parent.

    Raises:
        NotFoundError: If `rows` is empty (the parent does not exist).
    """

    if not rows:
        raise NotFoundError(not_found)

    records = aggregate(
        rows,
        parent_key,
        parent_fields=parent_fields,
        child_fields=child_fields,
        children=children,
        presence=presence,
    )
    return records[0]


def _first_child_key(child_fields: ChildFields) -> str:
    if isinstance(child_fields, str):
        return child_fields
    return next(iter(child_fields.values()))


def _child(row: RowMapping, child_fields: ChildFields) -> Any:
    if isinstance(child_fields, str):
        return row[child_fields]
    return {field: row[key] for field, key in child_fields.items()}
