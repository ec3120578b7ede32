from decimal import Decimal

from groupsplit.db.models import Expense, Group, GroupSnapshot, Participant
from groupsplit.services.groups import SettlementView
from groupsplit.services.settlement import Transfer
from groupsplit.services.summary import (
    format_balances,
    format_expenses,
    format_money,
    format_participants,
    format_settlement,
)

GROUP = Group(id=1, code="abc12xyz")
PEOPLE = (
    Participant(id=1, group_id=1, name="Alice"),
    Participant(id=2, group_id=1, name="Bob <3"),
)
DINNER = Expense(
    id=5,
    group_id=1,
    payer_id=1,
    description="Dinner & drinks",
    amount=Decimal("30.00"),
    participant_ids=(1, 2),
)


def view(expenses=(), balances=None, transfers=None) -> SettlementView:
    return SettlementView(
        snapshot=GroupSnapshot(group=GROUP, participants=PEOPLE, expenses=tuple(expenses)),
        balances=balances or {1: Decimal(0), 2: Decimal(0)},
        transfers=transfers or [],
    )


def test_format_money_rounds_to_cents():
    assert format_money(Decimal("3.333333")) == "3.33 EUR"
    assert format_money(Decimal("10"), "CHF") == "10.00 CHF"


def test_format_participants_escapes_names():
    text = format_participants(PEOPLE)

    assert "Bob &lt;3" in text
    assert "nobody yet" in format_participants(())


def test_format_expenses():
    snapshot = GroupSnapshot(group=GROUP, participants=PEOPLE, expenses=(DINNER,))

    text = format_expenses(snapshot)

    assert "#5 Dinner &amp; drinks: 30.00 EUR" in text
    assert "paid by Alice" in text
    assert "no expenses yet" in format_expenses(GroupSnapshot(group=GROUP))


def test_no_expenses_is_not_all_settled():
    assert format_settlement(view()) == "No expenses yet, nothing to settle."
    assert format_balances(view()) == "No expenses yet, nothing to settle."


def test_all_settled():
    assert format_settlement(view(expenses=[DINNER])) == "All settled up!"


def test_balances_and_transfers():
    result = view(
        expenses=[DINNER],
        balances={1: Decimal("15"), 2: Decimal("-15")},
        transfers=[Transfer(from_participant=2, to_participant=1, amount=Decimal("15"))],
    )

    balances = format_balances(result)
    settlement = format_settlement(result)

    assert "• Alice: +15.00 EUR" in balances
    assert "• Bob &lt;3: -15.00 EUR" in balances
    assert "• Bob &lt;3 → Alice: 15.00 EUR" in settlement


def test_near_zero_balance_is_shown_as_settled():
    result = view(expenses=[DINNER], balances={1: Decimal("0.004"), 2: Decimal("-0.004")})

    assert "Alice: 0.00 EUR (settled)" in format_balances(result)
