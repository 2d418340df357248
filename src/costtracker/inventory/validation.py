"""
=============================================================================
FORM FIELD VALIDATION
=============================================================================

Turns decoded form values into an Item. Every parser returns a
FieldResult holding either a value or the user-facing error message, so
handlers branch on the result instead of catching exceptions.

=============================================================================
FIELDS
=============================================================================

    ┌────────────────┬──────────────────────────────────────────────────────┐
    │ itemNameSelect │ Chosen name. "Otro..." means "use itemName instead"  │
    │ itemName       │ Free-text name (also used when no select was sent)   │
    │ itemQuantity   │ Optional, defaults to 1. Integer >= 1                │
    │ itemCost       │ Required. Number >= 0; "'", "," and spaces ignored   │
    │ itemIndex      │ /update only. Integer >= 0                           │
    └────────────────┴──────────────────────────────────────────────────────┘

Cost input is typed through a formatter that inserts grouping marks, so
"1'234,567.89" arrives and must read as 1234567.89.

Checks run in a fixed order and the first failure wins:

    1. required fields present  → "Faltan campos requeridos."
    2. index                    → "Índice de item inválido."
    3. quantity                 → "Cantidad inválida. ..."
    4. cost                     → "Costo inválido. ..."

=============================================================================
"""

import math
import re
from dataclasses import dataclass
from typing import Generic, Mapping, Optional, TypeVar

from .store import Item


T = TypeVar("T")

OTHER_NAME_OPTION = "Otro..."

MISSING_FIELDS_MESSAGE = "Faltan campos requeridos."
INVALID_QUANTITY_MESSAGE = "Cantidad inválida. Debe ser un número entero positivo."
INVALID_COST_MESSAGE = "Costo inválido. Usa un número positivo."
INVALID_INDEX_MESSAGE = "Índice de item inválido."

# Significant digits accepted in an index or quantity
MAX_INTEGER_DIGITS = 18

_INTEGER_PATTERN = re.compile(r"[0-9]+")
_DECIMAL_PATTERN = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_COST_NOISE = re.compile(r"[',\s]")


@dataclass(frozen=True)
class FieldResult(Generic[T]):
    """
    Outcome of parsing one field: a value, or an error message.

        >>> parse_quantity("3")
        FieldResult(value=3, error=None)
        >>> parse_quantity("0").ok
        False
    """

    value: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "FieldResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, message: str) -> "FieldResult[T]":
        return cls(error=message)


@dataclass(frozen=True)
class ItemSubmission:
    """A validated /submit or /update form."""

    item: Item
    index: Optional[int] = None


def resolve_item_name(form: Mapping[str, str]) -> Optional[str]:
    """
    Pick the item name from the dropdown or the free-text field.

        >>> resolve_item_name({"itemNameSelect": "Tuerca"})
        'Tuerca'
        >>> resolve_item_name({"itemNameSelect": "Otro...", "itemName": " Clavo "})
        'Clavo'

    Returns None when no non-blank name was given.
    """
    selected = form.get("itemNameSelect", "")

    if selected and selected != OTHER_NAME_OPTION:
        name = selected
    else:
        name = form.get("itemName", "")

    return name.strip() or None


def _parse_digits(text: str) -> Optional[int]:
    """Parse a plain digit string, or None if it is not one or is too long."""
    digits = text.lstrip("0") or "0"
    if not _INTEGER_PATTERN.fullmatch(text) or len(digits) > MAX_INTEGER_DIGITS:
        return None
    return int(digits)


def parse_index(raw: str, message: str = INVALID_INDEX_MESSAGE) -> FieldResult[int]:
    """Parse a 0-based item index (digits only)."""
    index = _parse_digits(raw.strip())
    if index is None:
        return FieldResult.failure(message)
    return FieldResult.success(index)


def parse_quantity(raw: Optional[str]) -> FieldResult[int]:
    """
    Parse a quantity: a positive base-10 integer.

    A missing field means 1.
    """
    if raw is None:
        return FieldResult.success(1)

    quantity = _parse_digits(raw.strip())
    if quantity is None or quantity < 1:
        return FieldResult.failure(INVALID_QUANTITY_MESSAGE)
    return FieldResult.success(quantity)


def normalize_cost_input(raw: str) -> str:
    """
    Strip grouping marks and whitespace from a cost.

        >>> normalize_cost_input("1'234,567.89")
        '1234567.89'
    """
    return _COST_NOISE.sub("", raw)


def parse_cost(raw: str) -> FieldResult[float]:
    """Parse a unit cost: a finite, non-negative number."""
    text = normalize_cost_input(raw)

    if not _DECIMAL_PATTERN.fullmatch(text):
        return FieldResult.failure(INVALID_COST_MESSAGE)

    cost = float(text)
    if not math.isfinite(cost) or cost < 0:
        return FieldResult.failure(INVALID_COST_MESSAGE)
    return FieldResult.success(cost)


def validate_item_form(
    form: Mapping[str, str],
    require_index: bool = False,
) -> FieldResult[ItemSubmission]:
    """
    Validate an add (/submit) or edit (/update) form.

    Args:
        form: Decoded form values.
        require_index: True for /update, where itemIndex is mandatory.

    Returns:
        FieldResult with an ItemSubmission, or the first error message.
    """
    name = resolve_item_name(form)
    raw_cost = form.get("itemCost")
    raw_index = form.get("itemIndex")

    if name is None or raw_cost is None or (require_index and raw_index is None):
        return FieldResult.failure(MISSING_FIELDS_MESSAGE)

    index: Optional[int] = None
    if require_index:
        parsed_index = parse_index(raw_index)
        if not parsed_index.ok:
            return FieldResult.failure(parsed_index.error)
        index = parsed_index.value

    quantity = parse_quantity(form.get("itemQuantity"))
    if not quantity.ok:
        return FieldResult.failure(quantity.error)

    cost = parse_cost(raw_cost)
    if not cost.ok:
        return FieldResult.failure(cost.error)

    return FieldResult.success(
        ItemSubmission(item=Item(name, quantity.value, cost.value), index=index)
    )
