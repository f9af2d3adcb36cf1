from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Iterable, Sequence

from splitsettle.models import Expense, Participant


# quantizing to cents must stay within the default 28-digit context
MAX_AMOUNT = Decimal("1e15")


class ValidationError(ValueError):
    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason


class UnknownParticipant(LookupError):
    def __init__(self, participant_id: str, expense_id: str) -> None:
        super().__init__(f"expense {expense_id!r} references unknown participant {participant_id!r}")
        self.participant_id = participant_id
        self.expense_id = expense_id


def to_amount(value: object) -> Decimal:
    """Convert user input to a Decimal amount.

    Floats go through ``str`` so that ``10.1`` stays ``Decimal("10.1")``.
    """
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, bool):
        raise ValidationError("amount", "must be a number")
    elif isinstance(value, (int, float, str)):
        try:
            amount = Decimal(str(value).strip().replace(",", "."))
        except InvalidOperation as exc:
            raise ValidationError("amount", "must be a number") from exc
    else:
        raise ValidationError("amount", "must be a number")

    if not amount.is_finite():
        raise ValidationError("amount", "must be a finite number")
    if amount <= 0:
        raise ValidationError("amount", "must be positive")
    if amount >= MAX_AMOUNT:
        raise ValidationError("amount", f"must be less than {MAX_AMOUNT:f}")
    return amount


def validate_name(name: str, field: str = "name") -> str:
    cleaned = name.strip() if name else ""
    if not cleaned:
        raise ValidationError(field, "must not be empty")
    return cleaned


def validate_expense_input(
    description: str,
    amount: object,
    paid_by: str | None,
    split_among: Sequence[str],
) -> tuple[str, Decimal, str, tuple[str, ...]]:
    cleaned = validate_name(description, "description")
    value = to_amount(amount)
    if not paid_by:
        raise ValidationError("paid_by", "payer is required")
    if not split_among:
        raise ValidationError("split_among", "must not be empty")
    # duplicates would charge the same beneficiary twice
    beneficiaries = tuple(dict.fromkeys(split_among))
    return cleaned, value, paid_by, beneficiaries


def assert_unique_participants(participants: Iterable[Participant]) -> dict[str, Participant]:
    by_id: dict[str, Participant] = {}
    for participant in participants:
        if participant.id in by_id:
            raise ValidationError("participants", f"duplicate id {participant.id!r}")
        by_id[participant.id] = participant
    return by_id


def assert_known_participants(participant_ids: Iterable[str], expenses: Iterable[Expense]) -> None:
    known = set(participant_ids)
    for expense in expenses:
        if expense.paid_by not in known:
            raise UnknownParticipant(expense.paid_by, expense.id)
        for participant_id in expense.split_among:
            if participant_id not in known:
                raise UnknownParticipant(participant_id, expense.id)
