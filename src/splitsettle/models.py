from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True, slots=True)
class Participant:
    id: str
    name: str


@dataclass(frozen=True, slots=True)
class Expense:
    id: str
    description: str
    amount: Decimal
    paid_by: str
    split_among: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class Settlement:
    from_participant: str
    to_participant: str
    amount: Decimal
