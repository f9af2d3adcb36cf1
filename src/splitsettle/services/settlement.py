from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, List, Mapping, Union

from splitsettle.logging import get_logger
from splitsettle.models import Settlement

log = get_logger(__name__)

TOLERANCE = Decimal("0.01")
CENT = Decimal("0.01")

NameLookup = Union[Callable[[str], str], Mapping[str, str]]


def round_amount(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def _resolve_name(name_of: NameLookup) -> Callable[[str], str]:
    if callable(name_of):
        return name_of
    return lambda participant_id: name_of[participant_id]


@dataclass(slots=True)
class OpenBalance:
    participant_id: str
    remaining: Decimal


def _ordered(entries: list[OpenBalance]) -> list[OpenBalance]:
    # largest magnitude first, ties by participant id
    return sorted(entries, key=lambda x: (-x.remaining, x.participant_id))


def resolve_settlements(balances: Mapping[str, Decimal], name_of: NameLookup) -> List[Settlement]:
    lookup = _resolve_name(name_of)
    creditors: list[OpenBalance] = []
    debtors: list[OpenBalance] = []

    for participant_id, balance in balances.items():
        if balance > TOLERANCE:
            creditors.append(OpenBalance(participant_id, balance))
        elif balance < -TOLERANCE:
            debtors.append(OpenBalance(participant_id, -balance))

    open_creditors = _ordered(creditors)
    open_debtors = _ordered(debtors)

    settlements: list[Settlement] = []
    i, j = 0, 0

    while i < len(open_debtors) and j < len(open_creditors):
        debtor = open_debtors[i]
        creditor = open_creditors[j]

        amount = min(debtor.remaining, creditor.remaining)
        if amount > TOLERANCE:
            settlements.append(
                Settlement(
                    from_participant=lookup(debtor.participant_id),
                    to_participant=lookup(creditor.participant_id),
                    amount=round_amount(amount),
                )
            )

        debtor.remaining -= amount
        creditor.remaining -= amount

        if debtor.remaining < TOLERANCE:
            i += 1
        if creditor.remaining < TOLERANCE:
            j += 1

    log.debug(
        "settlement.resolved",
        debtors=len(open_debtors),
        creditors=len(open_creditors),
        settlements=len(settlements),
    )
    return settlements
