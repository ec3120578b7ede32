from __future__ import annotations

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.types import CallbackQuery, Message

from groupsplit.config import Settings
from groupsplit.keyboards import expenses_keyboard
from groupsplit.services.errors import ValidationError
from groupsplit.services.groups import GroupService, resolve_participants
from groupsplit.services.summary import format_expense, format_expenses
from groupsplit.state import GroupSessions, require_current_group
from groupsplit.utils.parse import parse_names, split_args

expenses_router = Router()

ADD_EXPENSE_USAGE = (
    "Usage: /addexpense &lt;payer&gt; | &lt;amount&gt; | &lt;description&gt; | &lt;names or all&gt;\n"
    "Example: /addexpense Alice | 30 | Dinner | Alice, Bob, Carol"
)


def _extract_expense_id(text: str) -> int | None:
    parts = text.split()
    if len(parts) >= 2:
        try:
            return int(parts[1].lstrip("#"))
        except ValueError:
            return None
    return None


@expenses_router.message(Command("expenses"))
async def cmd_expenses(message: Message, service: GroupService, sessions: GroupSessions, settings: Settings) -> None:
    user = message.from_user
    if not user:
        return
    snapshot = await service.snapshot(require_current_group(sessions, user.id))
    await message.answer(
        format_expenses(snapshot, settings.currency_label),
        reply_markup=expenses_keyboard(snapshot.expenses),
    )


@expenses_router.message(Command("addexpense"))
async def cmd_addexpense(
    message: Message,
    service: GroupService,
    sessions: GroupSessions,
    settings: Settings,
) -> None:
    user = message.from_user
    if not user:
        return
    code = require_current_group(sessions, user.id)
    parts = split_args(message.text, "addexpense")
    if len(parts) < 2:
        await message.answer(ADD_EXPENSE_USAGE)
        return

    payer_name, amount = parts[0], parts[1]
    description = parts[2] if len(parts) > 2 else None
    names = parse_names(parts[3]) if len(parts) > 3 else []

    snapshot = await service.snapshot(code)
    try:
        (payer_id,) = resolve_participants([payer_name], snapshot.participants)
    except ValueError as exc:
        raise ValidationError(f"Unknown payer: {payer_name}.") from exc
    split = resolve_participants(names, snapshot.participants)

    expense = await service.add_expense(code, payer_id, amount, split, description)
    await message.answer(
        "🧾 Expense added:\n" + format_expense(expense, snapshot.names(), settings.currency_label)
    )


@expenses_router.message(Command("rmexpense"))
async def cmd_rmexpense(message: Message, service: GroupService, sessions: GroupSessions) -> None:
    user = message.from_user
    if not user:
        return
    code = require_current_group(sessions, user.id)
    expense_id = _extract_expense_id(message.text or "")
    if expense_id is None:
        await message.answer("Usage: /rmexpense &lt;expense_id&gt;")
        return
    await service.remove_expense(code, expense_id)
    await message.answer(f"🗑 Expense #{expense_id} removed.")


@expenses_router.callback_query(F.data.startswith("rmexp:"))
async def cb_rmexpense(
    callback: CallbackQuery,
    service: GroupService,
    sessions: GroupSessions,
    settings: Settings,
) -> None:
    code = require_current_group(sessions, callback.from_user.id)
    expense_id = int((callback.data or "").split(":", 1)[1])
    await service.remove_expense(code, expense_id)

    snapshot = await service.snapshot(code)
    if isinstance(callback.message, Message):
        await callback.message.edit_text(
            format_expenses(snapshot, settings.currency_label),
            reply_markup=expenses_keyboard(snapshot.expenses),
        )
    await callback.answer(f"Expense #{expense_id} removed")
