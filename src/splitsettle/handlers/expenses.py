from __future__ import annotations

from html import escape

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.types import CallbackQuery, Message

from splitsettle.config import get_settings
from splitsettle.handlers.common import command_args, error_text, pick_by_number
from splitsettle.keyboards import build_split_keyboard, confirm_clear_keyboard
from splitsettle.logging import get_logger
from splitsettle.services.report import format_amount, format_expense_line, format_report
from splitsettle.services.validation import UnknownParticipant, ValidationError, to_amount, validate_name
from splitsettle.state import Group, state

expenses_router = Router()

log = get_logger(__name__)

ADD_EXPENSE_USAGE = "Использование: /addexpense [описание] | [сумма] | [номер плательщика из /users]"


def format_expenses(group: Group) -> str:
    if not group.expenses:
        return "Расходов пока нет. Добавьте: /addexpense"

    currency = get_settings().currency
    lines = ["<b>Расходы:</b>"]
    for index, expense in enumerate(group.expenses, start=1):
        lines.append(format_expense_line(index, expense, group.name_of, currency))
    lines.append(f"\nИтого: {format_amount(group.total_expenses(), currency)}")
    return "\n".join(lines)


def split_prompt(group: Group) -> str:
    pending = state.get_pending_expense(group.group_id)
    if pending is None:
        return "Нет расхода в работе."
    description, amount, paid_by = pending
    return (
        f"<b>{escape(description)}</b> — {format_amount(amount, get_settings().currency)}, "
        f"платил {escape(group.name_of(paid_by))}\n\n"
        "Кто делит этот расход?"
    )


async def run_calculation(message: Message, group: Group) -> None:
    try:
        report = group.calculate()
    except (ValidationError, UnknownParticipant) as exc:
        log.info("bot.calculate.rejected", group_id=group.group_id, error=str(exc))
        await message.answer(error_text(exc))
        return
    await message.answer(format_report(report, group.name_of, get_settings().currency))


@expenses_router.message(Command("addexpense"))
async def cmd_addexpense(message: Message) -> None:
    group = state.get(message.chat.id)
    parts = [part.strip() for part in command_args(message).split("|")]
    if len(parts) < 3:
        await message.answer(ADD_EXPENSE_USAGE)
        return

    try:
        description = validate_name(parts[0], "description")
        amount = to_amount(parts[1])
    except ValidationError as exc:
        await message.answer(f"{error_text(exc)}\n{ADD_EXPENSE_USAGE}")
        return

    payer = pick_by_number(group.participants, parts[2])
    if payer is None:
        await message.answer(f"Некорректный номер плательщика.\n{ADD_EXPENSE_USAGE}")
        return

    state.set_pending_expense(group.group_id, description, amount, payer.id)
    group.deselect_all()
    await message.answer(split_prompt(group), reply_markup=build_split_keyboard(group))


@expenses_router.callback_query(F.data.startswith("split:"))
async def cb_split(callback: CallbackQuery) -> None:
    group = state.get(callback.message.chat.id)
    action = callback.data.split(":", 2)

    if state.get_pending_expense(group.group_id) is None:
        await callback.answer("Расход уже сохранён или отменён", show_alert=True)
        return

    if action[1] == "toggle" and len(action) == 3:
        group.toggle_in_split(action[2])
    elif action[1] == "all":
        group.select_all()
    elif action[1] == "none":
        group.deselect_all()
    elif action[1] == "cancel":
        state.pop_pending_expense(group.group_id)
        group.deselect_all()
        await callback.message.edit_text("Добавление расхода отменено.")
        await callback.answer()
        return
    elif action[1] == "save":
        description, amount, paid_by = state.get_pending_expense(group.group_id)
        try:
            expense = group.add_expense(description, amount, paid_by)
        except ValidationError as exc:
            await callback.answer(error_text(exc), show_alert=True)
            return
        state.pop_pending_expense(group.group_id)
        await callback.message.edit_text(
            f"Расход добавлен: {escape(expense.description)} — "
            f"{format_amount(expense.amount, get_settings().currency)}\n"
            f"Делят: {escape(group.split_names(expense))}"
        )
        await callback.answer()
        return

    await callback.message.edit_reply_markup(reply_markup=build_split_keyboard(group))
    await callback.answer()


@expenses_router.message(Command("removeexpense"))
async def cmd_removeexpense(message: Message) -> None:
    group = state.get(message.chat.id)
    expense = pick_by_number(group.expenses, command_args(message))
    if expense is None:
        await message.answer("Использование: /removeexpense [номер из /expenses]")
        return
    group.remove_expense(expense.id)
    await message.answer(f"Расход удалён: {escape(expense.description)}")


@expenses_router.message(Command("expenses"))
async def cmd_expenses(message: Message) -> None:
    await message.answer(format_expenses(state.get(message.chat.id)))


@expenses_router.callback_query(F.data == "menu:expenses")
async def cb_expenses(callback: CallbackQuery) -> None:
    await callback.message.answer(format_expenses(state.get(callback.message.chat.id)))
    await callback.answer()


@expenses_router.message(Command("calculate"))
async def cmd_calculate(message: Message) -> None:
    await run_calculation(message, state.get(message.chat.id))


@expenses_router.callback_query(F.data == "menu:calculate")
async def cb_calculate(callback: CallbackQuery) -> None:
    await run_calculation(callback.message, state.get(callback.message.chat.id))
    await callback.answer()


@expenses_router.message(Command("reset"))
async def cmd_reset(message: Message) -> None:
    state.get(message.chat.id).reset()
    await message.answer("Результаты расчёта сброшены.")


@expenses_router.message(Command("clearexpenses"))
async def cmd_clearexpenses(message: Message) -> None:
    group = state.get(message.chat.id)
    if not group.expenses:
        await message.answer("Расходов и так нет.")
        return
    await message.answer(
        f"Удалить все расходы ({len(group.expenses)} шт.)?",
        reply_markup=confirm_clear_keyboard(),
    )


@expenses_router.callback_query(F.data == "clear:confirm")
async def cb_clear_confirm(callback: CallbackQuery) -> None:
    group = state.get(callback.message.chat.id)
    group.clear_expenses()
    log.info("bot.expenses.cleared", group_id=group.group_id)
    await callback.message.edit_text("Все расходы удалены.")
    await callback.answer()


@expenses_router.callback_query(F.data == "clear:cancel")
async def cb_clear_cancel(callback: CallbackQuery) -> None:
    await callback.message.edit_text("Расходы сохранены.")
    await callback.answer()
