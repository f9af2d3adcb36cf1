from __future__ import annotations

from html import escape

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.types import CallbackQuery, Message

from splitsettle.config import get_settings
from splitsettle.handlers.common import command_args, error_text, pick_by_number
from splitsettle.services.report import BALANCE_LABELS, balance_class, format_amount
from splitsettle.services.validation import ValidationError
from splitsettle.state import Group, state

participants_router = Router()


def format_participants(group: Group) -> str:
    if not group.participants:
        return "Участников пока нет. Добавьте: /adduser [имя]"

    currency = get_settings().currency
    lines = ["<b>Участники:</b>"]
    for index, participant in enumerate(group.participants, start=1):
        line = f"{index}. {escape(participant.name)}"
        if not group.results.is_empty():
            balance = group.balance_of(participant.id)
            line += f" — {BALANCE_LABELS[balance_class(balance)]}"
            if balance_class(balance) != "neutral":
                line += f" {format_amount(abs(balance), currency)}"
        lines.append(line)
    return "\n".join(lines)


@participants_router.message(Command("adduser"))
async def cmd_adduser(message: Message) -> None:
    group = state.get(message.chat.id)
    try:
        participant = group.add_participant(command_args(message))
    except ValidationError as exc:
        await message.answer(f"{error_text(exc)}\nИспользование: /adduser [имя]")
        return
    await message.answer(f"Участник добавлен: {escape(participant.name)}")


@participants_router.message(Command("removeuser"))
async def cmd_removeuser(message: Message) -> None:
    group = state.get(message.chat.id)
    participant = pick_by_number(group.participants, command_args(message))
    if participant is None:
        await message.answer("Использование: /removeuser [номер из /users]")
        return

    expenses_before = len(group.expenses)
    group.remove_participant(participant.id)
    dropped = expenses_before - len(group.expenses)

    text = f"Участник удалён: {escape(participant.name)}"
    if dropped:
        text += f"\nУдалено связанных расходов: {dropped}"
    await message.answer(text)


@participants_router.message(Command("users"))
async def cmd_users(message: Message) -> None:
    await message.answer(format_participants(state.get(message.chat.id)))


@participants_router.callback_query(F.data == "menu:users")
async def cb_users(callback: CallbackQuery) -> None:
    await callback.message.answer(format_participants(state.get(callback.message.chat.id)))
    await callback.answer()
