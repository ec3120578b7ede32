from __future__ import annotations

from typing import Iterable

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from groupsplit.db.models import Expense


def share_url(bot_username: str, code: str) -> str:
    return f"https://t.me/{bot_username}?start=group_{code}"


def start_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [InlineKeyboardButton(text="➕ New group", callback_data="menu:newgroup")],
            [InlineKeyboardButton(text="ℹ️ Help", callback_data="menu:help")],
        ]
    )


def group_menu_keyboard(code: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(text="👥 Participants", callback_data="group:participants"),
                InlineKeyboardButton(text="🧾 Expenses", callback_data="group:expenses"),
            ],
            [
                InlineKeyboardButton(text="📊 Balances", callback_data="group:balances"),
                InlineKeyboardButton(text="💸 Settle up", callback_data="group:settle"),
            ],
            [InlineKeyboardButton(text="🔗 Share", switch_inline_query=f"group_{code}")],
        ]
    )


def expenses_keyboard(expenses: Iterable[Expense]) -> InlineKeyboardMarkup:
    rows = [
        [InlineKeyboardButton(text=f"🗑 Remove #{expense.id}", callback_data=f"rmexp:{expense.id}")]
        for expense in expenses
    ]
    rows.append([InlineKeyboardButton(text="◀️ Back", callback_data="group:menu")])
    return InlineKeyboardMarkup(inline_keyboard=rows)


def back_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[[InlineKeyboardButton(text="◀️ Back", callback_data="group:menu")]]
    )
