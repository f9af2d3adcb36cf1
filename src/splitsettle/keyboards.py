from __future__ import annotations

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from splitsettle.state import Group


def get_main_menu_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="👥 Участники", callback_data="menu:users")],
        [InlineKeyboardButton(text="🧾 Расходы", callback_data="menu:expenses")],
        [InlineKeyboardButton(text="🧮 Рассчитать", callback_data="menu:calculate")],
        [InlineKeyboardButton(text="ℹ️ Помощь", callback_data="menu:help")],
    ])


def build_split_keyboard(group: Group) -> InlineKeyboardMarkup:
    rows: list[list[InlineKeyboardButton]] = []
    for participant in group.participants:
        mark = "✅" if group.is_in_split(participant.id) else "▫️"
        rows.append(
            [
                InlineKeyboardButton(
                    text=f"{mark} {participant.name}",
                    callback_data=f"split:toggle:{participant.id}",
                )
            ]
        )

    rows.append(
        [
            InlineKeyboardButton(text="Выбрать всех", callback_data="split:all"),
            InlineKeyboardButton(text="Снять всех", callback_data="split:none"),
        ]
    )
    rows.append(
        [
            InlineKeyboardButton(text="Сохранить", callback_data="split:save"),
            InlineKeyboardButton(text="Отмена", callback_data="split:cancel"),
        ]
    )
    return InlineKeyboardMarkup(inline_keyboard=rows)


def confirm_clear_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(text="Да, удалить всё", callback_data="clear:confirm"),
                InlineKeyboardButton(text="Отмена", callback_data="clear:cancel"),
            ]
        ]
    )
