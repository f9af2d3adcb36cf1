from decimal import Decimal

import pytest

from splitsettle.models import Expense, Participant
from splitsettle.services.balances import compute_balances
from splitsettle.services.settlement import TOLERANCE
from splitsettle.services.validation import UnknownParticipant, ValidationError

A = Participant(id="a", name="Anna")
B = Participant(id="b", name="Boris")
C = Participant(id="c", name="Clara")


def expense(expense_id: str, amount: str, paid_by: str, *split: str) -> Expense:
    return Expense(
        id=expense_id,
        description=f"expense {expense_id}",
        amount=Decimal(amount),
        paid_by=paid_by,
        split_among=split,
    )


def test_dinner_split_three_ways():
    balances = compute_balances([A, B, C], [expense("e1", "90", "a", "a", "b", "c")])
    assert balances == {"a": Decimal(60), "b": Decimal(-30), "c": Decimal(-30)}


def test_two_people_even_split():
    balances = compute_balances([A, B], [expense("e1", "10", "a", "a", "b")])
    assert balances == {"a": Decimal(5), "b": Decimal(-5)}


def test_payer_outside_split():
    balances = compute_balances([A, B, C], [expense("e1", "20", "a", "b", "c")])
    assert balances == {"a": Decimal(20), "b": Decimal(-10), "c": Decimal(-10)}


def test_uninvolved_participant_has_zero_balance():
    balances = compute_balances([A, B, C], [expense("e1", "10", "a", "a", "b")])
    assert balances["c"] == 0


def test_shares_keep_full_precision():
    balances = compute_balances([A, B, C], [expense("e1", "10", "a", "a", "b", "c")])
    assert balances["b"] == Decimal(-10) / Decimal(3)
    assert balances["b"] != Decimal("-3.33")
    assert abs(sum(balances.values())) < TOLERANCE


def test_net_zero_expenses():
    expenses = [
        expense("e1", "30", "a", "b"),
        expense("e2", "30", "b", "c"),
        expense("e3", "30", "c", "a"),
    ]
    balances = compute_balances([A, B, C], expenses)
    assert all(value == 0 for value in balances.values())


def test_zero_sum_over_mixed_expenses():
    expenses = [
        expense("e1", "100", "a", "a", "b", "c"),
        expense("e2", "17.35", "b", "a", "c"),
        expense("e3", "4.99", "c", "a", "b", "c"),
        expense("e4", "250", "c", "b"),
    ]
    balances = compute_balances([A, B, C], expenses)
    assert abs(sum(balances.values())) < TOLERANCE


def test_unknown_beneficiary():
    with pytest.raises(UnknownParticipant) as exc_info:
        compute_balances([A, B], [expense("e1", "10", "a", "a", "zed")])

    assert exc_info.value.participant_id == "zed"
    assert exc_info.value.expense_id == "e1"


def test_unknown_payer_is_reported_before_any_balance():
    expenses = [expense("e1", "10", "a", "a", "b"), expense("e2", "10", "ghost", "a")]
    with pytest.raises(UnknownParticipant) as exc_info:
        compute_balances([A, B], expenses)

    assert exc_info.value.participant_id == "ghost"
    assert exc_info.value.expense_id == "e2"


def test_duplicate_participant_ids_rejected():
    with pytest.raises(ValidationError) as exc_info:
        compute_balances([A, Participant(id="a", name="Other")], [])
    assert exc_info.value.field == "participants"


def test_empty_split_rejected():
    with pytest.raises(ValidationError):
        compute_balances([A], [expense("e1", "10", "a")])


def test_inputs_are_not_mutated():
    participants = [A, B]
    expenses = [expense("e1", "10", "a", "a", "b")]
    compute_balances(participants, expenses)

    assert participants == [A, B]
    assert expenses == [expense("e1", "10", "a", "a", "b")]
