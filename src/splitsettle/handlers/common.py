from __future__ import annotations

from typing import Optional, Sequence, TypeVar

from aiogram.types import Message

from splitsettle.services.validation import UnknownParticipant, ValidationError

T = TypeVar("T")

FIELD_MESSAGES = {
    "name": "Имя не может быть пустым.",
    "description": "Описание расхода не может быть пустым.",
    "amount": "Сумма должна быть положительным числом меньше 10¹⁵.",
    "paid_by": "Укажите, кто платил.",
    "split_among": "Выберите хотя бы одного участника для разделения.",
    "participant": "Такого участника нет.",
    "participants": "Сначала добавьте участников!",
    "expense": "Такого расхода нет.",
    "expenses": "Добавьте хотя бы один расход!",
}


def error_text(exc: Exception) -> str:
    if isinstance(exc, UnknownParticipant):
        return "Расход ссылается на удалённого участника. Проверьте список расходов."
    if isinstance(exc, ValidationError):
        return FIELD_MESSAGES.get(exc.field, f"Ошибка в поле {exc.field}: {exc.reason}")
    return "Что-то пошло не так."


def command_args(message: Message) -> str:
    if not message.text:
        return ""
    parts = message.text.split(maxsplit=1)
    return parts[1].strip() if len(parts) > 1 else ""


def pick_by_number(items: Sequence[T], value: str) -> Optional[T]:
    """Элемент списка по его номеру (с единицы) из сообщения пользователя."""
    try:
        index = int(value.strip())
    except ValueError:
        return None
    if index < 1 or index > len(items):
        return None
    return items[index - 1]
