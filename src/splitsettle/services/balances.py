from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Sequence

from splitsettle.logging import get_logger
from splitsettle.models import Expense, Participant
from splitsettle.services.validation import (
    ValidationError,
    assert_known_participants,
    assert_unique_participants,
)

log = get_logger(__name__)


def expense_share(expense: Expense) -> Decimal:
    if not expense.split_among:
        raise ValidationError("split_among", f"expense {expense.id!r} has no beneficiaries")
    return expense.amount / Decimal(len(expense.split_among))


def compute_balances(participants: Iterable[Participant], expenses: Sequence[Expense]) -> dict[str, Decimal]:
    """Net balance per participant id, positive when the participant is owed money.

    Shares are kept at full decimal precision; rounding happens only when
    settlements are emitted.
    """
    by_id = assert_unique_participants(participants)
    assert_known_participants(by_id, expenses)

    balances: dict[str, Decimal] = {participant_id: Decimal(0) for participant_id in by_id}
    for expense in expenses:
        share = expense_share(expense)
        balances[expense.paid_by] += expense.amount
        for participant_id in expense.split_among:
            balances[participant_id] -= share

    log.debug("balances.computed", participants=len(balances), expenses=len(expenses))
    return balances
