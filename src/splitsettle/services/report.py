from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from html import escape
from typing import Callable, Iterable, Mapping, Sequence

from splitsettle.models import Expense, Settlement
from splitsettle.services.settlement import TOLERANCE, round_amount


BALANCE_LABELS = {
    "positive": "получает",
    "negative": "должен",
    "neutral": "в расчёте",
}


@dataclass(slots=True)
class SettlementReport:
    balances: dict[str, Decimal] = field(default_factory=dict)
    settlements: list[Settlement] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.balances and not self.settlements


def is_settled(amount: Decimal) -> bool:
    return abs(amount) <= TOLERANCE


def balance_class(amount: Decimal) -> str:
    if amount > TOLERANCE:
        return "positive"
    if amount < -TOLERANCE:
        return "negative"
    return "neutral"


def format_amount(amount: Decimal, currency: str) -> str:
    return f"{round_amount(amount):.2f} {currency}"


def format_expense_line(index: int, expense: Expense, name_of: Callable[[str], str], currency: str) -> str:
    beneficiaries = ", ".join(escape(name_of(pid)) for pid in expense.split_among)
    return (
        f"{index}. {escape(expense.description)} — {format_amount(expense.amount, currency)} "
        f"(платил {escape(name_of(expense.paid_by))}; делят: {beneficiaries})"
    )


def format_balance_lines(
    balances: Mapping[str, Decimal],
    name_of: Callable[[str], str],
    currency: str,
) -> list[str]:
    lines = []
    for participant_id, amount in balances.items():
        label = BALANCE_LABELS[balance_class(amount)]
        if is_settled(amount):
            lines.append(f"• {escape(name_of(participant_id))}: {label}")
        else:
            lines.append(f"• {escape(name_of(participant_id))}: {label} {format_amount(abs(amount), currency)}")
    return lines


def format_settlement_lines(settlements: Iterable[Settlement], currency: str) -> list[str]:
    return [
        f"• {escape(s.from_participant)} → {escape(s.to_participant)}: {format_amount(s.amount, currency)}"
        for s in settlements
    ]


def format_report(report: SettlementReport, name_of: Callable[[str], str], currency: str) -> str:
    lines = ["<b>Балансы:</b>", *format_balance_lines(report.balances, name_of, currency)]
    lines.append("")
    if report.settlements:
        lines.append("<b>Для сведения долгов:</b>")
        lines.extend(format_settlement_lines(report.settlements, currency))
    else:
        lines.append("Все в расчёте, переводы не нужны 🎉")
    return "\n".join(lines)


def total_amount(expenses: Sequence[Expense]) -> Decimal:
    return sum((expense.amount for expense in expenses), Decimal(0))
