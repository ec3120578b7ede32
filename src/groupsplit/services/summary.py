from __future__ import annotations

from decimal import Decimal
from html import escape
from typing import Iterable, Mapping

from groupsplit.db.models import Expense, GroupSnapshot, Participant
from groupsplit.services.groups import SettlementView
from groupsplit.services.settlement import Transfer
from groupsplit.services.tolerance import is_settled, to_cents

UNKNOWN = "unknown"


def format_money(amount: Decimal, currency: str = "EUR") -> str:
    return f"{to_cents(amount):.2f} {currency}"


def format_participants(participants: Iterable[Participant]) -> str:
    lines = ["<b>Participants:</b>"]
    listed = [f"• {escape(p.name)}" for p in participants]
    lines.extend(listed or ["• nobody yet, add someone with /addp"])
    return "\n".join(lines)


def format_expense(expense: Expense, names: Mapping[int, str], currency: str = "EUR") -> str:
    payer = names.get(expense.payer_id, UNKNOWN)
    split = ", ".join(names.get(pid, UNKNOWN) for pid in expense.participant_ids) or "nobody"
    return (
        f"#{expense.id} {escape(expense.description)}: {format_money(expense.amount, currency)} "
        f"(paid by {escape(payer)}, split between {escape(split)})"
    )


def format_expenses(snapshot: GroupSnapshot, currency: str = "EUR") -> str:
    names = snapshot.names()
    lines = ["<b>Expenses:</b>"]
    if not snapshot.expenses:
        lines.append("• no expenses yet")
    for expense in snapshot.expenses:
        lines.append(f"• {format_expense(expense, names, currency)}")
    return "\n".join(lines)


def format_balance_line(name: str, balance: Decimal, currency: str = "EUR") -> str:
    if is_settled(balance):
        return f"• {escape(name)}: {format_money(Decimal(0), currency)} (settled)"
    sign = "+" if balance > 0 else ""
    return f"• {escape(name)}: {sign}{format_money(balance, currency)}"


def format_transfer(transfer: Transfer, names: Mapping[int, str], currency: str = "EUR") -> str:
    debtor = escape(names.get(transfer.from_participant, UNKNOWN))
    creditor = escape(names.get(transfer.to_participant, UNKNOWN))
    return f"• {debtor} → {creditor}: {format_money(transfer.amount, currency)}"


def format_balances(view: SettlementView, currency: str = "EUR") -> str:
    snapshot = view.snapshot
    if not snapshot.participants:
        return "Add at least one participant first."
    if not view.has_expenses:
        return "No expenses yet, nothing to settle."

    lines = ["<b>Balances:</b>"]
    for participant in snapshot.participants:
        lines.append(format_balance_line(participant.name, view.balances.get(participant.id, Decimal(0)), currency))
    return "\n".join(lines)


def format_settlement(view: SettlementView, currency: str = "EUR") -> str:
    if not view.snapshot.participants:
        return "Add at least one participant first."
    if not view.has_expenses:
        return "No expenses yet, nothing to settle."
    if view.is_settled:
        return "All settled up!"

    names = view.snapshot.names()
    lines = ["<b>To settle up:</b>"]
    lines.extend(format_transfer(transfer, names, currency) for transfer in view.transfers)
    return "\n".join(lines)
