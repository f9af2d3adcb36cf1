from __future__ import annotations

from aiogram import F, Router
from aiogram.filters import Command, CommandStart
from aiogram.types import CallbackQuery, InlineKeyboardButton, InlineKeyboardMarkup, Message

from splitsettle.keyboards import get_main_menu_keyboard
from splitsettle.state import state

basic_router = Router()

HELP_TEXT = (
    "<b>📖 Справка по командам</b>\n\n"
    "<b>Участники:</b>\n"
    "/adduser [имя] - добавить участника\n"
    "/removeuser [номер] - удалить участника\n"
    "/users - список участников\n\n"
    "<b>Расходы:</b>\n"
    "/addexpense [описание] | [сумма] | [номер плательщика] - добавить расход\n"
    "/removeexpense [номер] - удалить расход\n"
    "/expenses - список расходов\n"
    "/clearexpenses - удалить все расходы\n\n"
    "<b>Расчёт:</b>\n"
    "/calculate - кто кому сколько должен\n"
    "/reset - сбросить результаты расчёта"
)


def greeting(first_name: str) -> str:
    return (
        f"👋 Привет, {first_name}!\n\n"
        "Я <b>SplitSettle</b> — помогу честно поделить общие расходы "
        "и посчитаю, кто кому должен.\n\n"
        "Выбери действие:"
    )


@basic_router.message(CommandStart())
async def cmd_start(message: Message) -> None:
    user = message.from_user
    state.pop_pending_expense(message.chat.id)
    await message.answer(
        greeting(user.first_name if user else "друг"),
        reply_markup=get_main_menu_keyboard(),
    )


@basic_router.message(Command("help"))
async def cmd_help(message: Message) -> None:
    await message.answer(HELP_TEXT)


@basic_router.callback_query(F.data == "menu:main")
async def cb_main_menu(callback: CallbackQuery) -> None:
    user = callback.from_user
    await callback.message.edit_text(
        greeting(user.first_name if user else "друг"),
        reply_markup=get_main_menu_keyboard(),
    )
    await callback.answer()


@basic_router.callback_query(F.data == "menu:help")
async def cb_help_menu(callback: CallbackQuery) -> None:
    keyboard = InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="◀️ Назад в меню", callback_data="menu:main")]
    ])
    await callback.message.edit_text(HELP_TEXT, reply_markup=keyboard)
    await callback.answer()
