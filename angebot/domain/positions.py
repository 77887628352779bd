from __future__ import annotations

from dataclasses import replace
from typing import Any, Iterable, Iterator, overload

from angebot.domain.models import CatalogItem, Position, PositionType
from angebot.domain.numbers import parse_number
from angebot.errors import ValidationError

TEXT_FIELDS = {"description", "unit"}
NUMERIC_FIELDS = {"quantity", "unit_price"}
FIELD_ALIASES = {"unitPrice": "unit_price"}


class PositionList:
    """Geordnete Positionsliste eines Angebots (Editor-Seite)."""

    def __init__(self, positions: Iterable[Position] | None = None) -> None:
        self._items: list[Position] = list(positions or [])

    @classmethod
    def with_default_item(cls) -> "PositionList":
        return cls([Position.new(PositionType.ITEM)])

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Position]:
        return iter(self._items)

    @overload
    def __getitem__(self, index: int) -> Position: ...

    @overload
    def __getitem__(self, index: slice) -> list[Position]: ...

    def __getitem__(self, index):
        return self._items[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PositionList):
            return self._items == other._items
        if isinstance(other, list):
            return self._items == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"PositionList({self._items!r})"

    def append(self, kind: PositionType | str) -> Position:
        position = Position.new(kind)
        self._items.append(position)
        return position

    def remove(self, index: int) -> Position:
        self._check_index(index)
        return self._items.pop(index)

    def reorder(self, from_index: int, to_index: int) -> None:
        """Moves one position; everything else keeps its relative order."""
        self._check_index(from_index)
        self._check_index(to_index)
        if from_index == to_index:
            return
        moved = self._items.pop(from_index)
        self._items.insert(to_index, moved)

    def update_field(self, index: int, field: str, raw_value: Any) -> Position:
        self._check_index(index)
        name = FIELD_ALIASES.get(field, field)
        position = self._items[index]
        if name == "quantity":
            position.quantity = max(0.0, parse_number(raw_value, 0.0))
        elif name in NUMERIC_FIELDS:
            setattr(position, name, parse_number(raw_value, 0.0))
        elif name in TEXT_FIELDS:
            setattr(position, name, "" if raw_value is None else str(raw_value))
        else:
            raise ValidationError(f"Unbekanntes Positionsfeld: {field}", field=field)
        return position

    def add_catalog_item(self, item: CatalogItem) -> list[Position]:
        """Katalogartikel als Detailposition, optionale Beschreibung als eigene Zeile."""
        added = [
            Position(
                type=PositionType.ITEM,
                description=item.name,
                quantity=1.0,
                unit=item.unit or "Stk.",
                unit_price=item.unit_price or 0.0,
            )
        ]
        desc = (item.description or "").strip()
        if desc:
            added.append(Position(type=PositionType.DESCRIPTION, description=desc))
        self._items.extend(added)
        return added

    def replace_all(self, positions: Iterable[Position]) -> None:
        self._items = list(positions)

    def snapshot(self) -> list[Position]:
        return [replace(p) for p in self._items]

    def to_list(self) -> list[dict[str, Any]]:
        return [p.to_dict() for p in self._items]

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._items):
            raise IndexError(f"position index out of range: {index}")
