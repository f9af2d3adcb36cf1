"""Состояние групп: участники, расходы и последний расчёт по каждому чату."""

from __future__ import annotations

import secrets
from decimal import Decimal
from typing import Iterable, Optional

from splitsettle.logging import get_logger
from splitsettle.models import Expense, Participant
from splitsettle.services.balances import compute_balances
from splitsettle.services.report import SettlementReport, total_amount
from splitsettle.services.settlement import resolve_settlements
from splitsettle.services.validation import ValidationError, validate_expense_input, validate_name

UNKNOWN_NAME = "Unknown"

log = get_logger(__name__)


class Group:
    def __init__(self, group_id: int) -> None:
        self.group_id = group_id
        self.participants: list[Participant] = []
        self.expenses: list[Expense] = []
        self.results = SettlementReport()
        self._draft_split: list[str] = []

    def _new_id(self) -> str:
        used = {p.id for p in self.participants} | {e.id for e in self.expenses}
        while True:
            candidate = secrets.token_hex(4)
            if candidate not in used:
                return candidate

    # Участники

    def get_participant(self, participant_id: str) -> Optional[Participant]:
        for participant in self.participants:
            if participant.id == participant_id:
                return participant
        return None

    def name_of(self, participant_id: str) -> str:
        participant = self.get_participant(participant_id)
        return participant.name if participant else UNKNOWN_NAME

    def add_participant(self, name: str) -> Participant:
        participant = Participant(id=self._new_id(), name=validate_name(name))
        self.participants.append(participant)
        log.info("group.participant.added", group_id=self.group_id, participant_id=participant.id)
        return participant

    def remove_participant(self, participant_id: str) -> None:
        if self.get_participant(participant_id) is None:
            raise ValidationError("participant", f"unknown participant {participant_id!r}")

        self.participants = [p for p in self.participants if p.id != participant_id]

        expenses: list[Expense] = []
        for expense in self.expenses:
            if expense.paid_by == participant_id:
                continue
            split = tuple(pid for pid in expense.split_among if pid != participant_id)
            if not split:
                continue
            if split != expense.split_among:
                expense = Expense(
                    id=expense.id,
                    description=expense.description,
                    amount=expense.amount,
                    paid_by=expense.paid_by,
                    split_among=split,
                )
            expenses.append(expense)

        dropped = len(self.expenses) - len(expenses)
        self.expenses = expenses
        self._draft_split = [pid for pid in self._draft_split if pid != participant_id]
        self.reset()
        log.info(
            "group.participant.removed",
            group_id=self.group_id,
            participant_id=participant_id,
            expenses_dropped=dropped,
        )

    # Расходы

    def add_expense(
        self,
        description: str,
        amount: object,
        paid_by: Optional[str],
        split_among: Optional[Iterable[str]] = None,
    ) -> Expense:
        split = list(split_among) if split_among is not None else list(self._draft_split)
        cleaned, value, payer, beneficiaries = validate_expense_input(description, amount, paid_by, split)

        known = {p.id for p in self.participants}
        for participant_id in (payer, *beneficiaries):
            if participant_id not in known:
                raise ValidationError("participant", f"unknown participant {participant_id!r}")

        expense = Expense(
            id=self._new_id(),
            description=cleaned,
            amount=value,
            paid_by=payer,
            split_among=beneficiaries,
        )
        self.expenses.append(expense)
        self._draft_split = []
        log.info("group.expense.added", group_id=self.group_id, expense_id=expense.id)
        return expense

    def remove_expense(self, expense_id: str) -> None:
        before = len(self.expenses)
        self.expenses = [e for e in self.expenses if e.id != expense_id]
        if len(self.expenses) == before:
            raise ValidationError("expense", f"unknown expense {expense_id!r}")
        log.info("group.expense.removed", group_id=self.group_id, expense_id=expense_id)

    def clear_expenses(self) -> None:
        self.expenses = []
        self.reset()

    def total_expenses(self) -> Decimal:
        return total_amount(self.expenses)

    def split_names(self, expense: Expense) -> str:
        return ", ".join(self.name_of(pid) for pid in expense.split_among)

    # Черновик разделения

    @property
    def draft_split(self) -> tuple[str, ...]:
        return tuple(self._draft_split)

    def toggle_in_split(self, participant_id: str) -> bool:
        if participant_id in self._draft_split:
            self._draft_split.remove(participant_id)
            return False
        self._draft_split.append(participant_id)
        return True

    def is_in_split(self, participant_id: str) -> bool:
        return participant_id in self._draft_split

    def select_all(self) -> None:
        self._draft_split = [p.id for p in self.participants]

    def deselect_all(self) -> None:
        self._draft_split = []

    # Расчёт

    def calculate(self) -> SettlementReport:
        if not self.expenses:
            raise ValidationError("expenses", "add at least one expense")
        if not self.participants:
            raise ValidationError("participants", "add participants first")

        balances = compute_balances(self.participants, self.expenses)
        settlements = resolve_settlements(balances, self.name_of)
        self.results = SettlementReport(balances=balances, settlements=settlements)
        log.info(
            "group.calculated",
            group_id=self.group_id,
            expenses=len(self.expenses),
            settlements=len(settlements),
        )
        return self.results

    def reset(self) -> None:
        if self.results.is_empty():
            return
        self.results = SettlementReport()

    def balance_of(self, participant_id: str) -> Decimal:
        return self.results.balances.get(participant_id, Decimal(0))


class GroupStateManager:
    def __init__(self) -> None:
        self._groups: dict[int, Group] = {}
        self._pending_expense: dict[int, tuple[str, Decimal, str]] = {}

    def get(self, group_id: int) -> Group:
        group = self._groups.get(group_id)
        if group is None:
            group = self._groups[group_id] = Group(group_id)
        return group

    def set_pending_expense(self, group_id: int, description: str, amount: Decimal, paid_by: str) -> None:
        self._pending_expense[group_id] = (description, amount, paid_by)

    def get_pending_expense(self, group_id: int) -> Optional[tuple[str, Decimal, str]]:
        return self._pending_expense.get(group_id)

    def pop_pending_expense(self, group_id: int) -> Optional[tuple[str, Decimal, str]]:
        return self._pending_expense.pop(group_id, None)

    def clear_group(self, group_id: int) -> None:
        self._groups.pop(group_id, None)
        self._pending_expense.pop(group_id, None)


state = GroupStateManager()
