from decimal import Decimal

from groupsplit.db.models import Expense, Participant
from groupsplit.services.balances import compute_balances
from groupsplit.services.tolerance import EPSILON

ALICE, BOB, CAROL = 1, 2, 3

PARTICIPANTS = [
    Participant(id=ALICE, group_id=1, name="Alice"),
    Participant(id=BOB, group_id=1, name="Bob"),
    Participant(id=CAROL, group_id=1, name="Carol"),
]


def expense(expense_id: int, payer: int, amount: str, split: tuple[int, ...]) -> Expense:
    return Expense(
        id=expense_id,
        group_id=1,
        payer_id=payer,
        description="Expense",
        amount=Decimal(amount),
        participant_ids=split,
    )


def test_even_split_including_payer():
    balances = compute_balances(PARTICIPANTS, [expense(1, ALICE, "30", (ALICE, BOB, CAROL))])

    assert balances == {ALICE: Decimal("20"), BOB: Decimal("-10"), CAROL: Decimal("-10")}


def test_payer_outside_split():
    participants = PARTICIPANTS[:2]
    balances = compute_balances(participants, [expense(1, ALICE, "50", (BOB,))])

    assert balances == {ALICE: Decimal("50"), BOB: Decimal("-50")}


def test_cancelling_expenses():
    balances = compute_balances(
        PARTICIPANTS[:2],
        [
            expense(1, ALICE, "20", (ALICE, BOB)),
            expense(2, BOB, "20", (ALICE, BOB)),
        ],
    )

    assert balances == {ALICE: Decimal("0"), BOB: Decimal("0")}


def test_idle_participant_is_exactly_zero():
    balances = compute_balances(PARTICIPANTS, [expense(1, ALICE, "10", (ALICE, BOB))])

    assert balances[CAROL] == Decimal("0")
    assert set(balances) == {ALICE, BOB, CAROL}


def test_no_expenses():
    balances = compute_balances(PARTICIPANTS, [])

    assert balances == {ALICE: 0, BOB: 0, CAROL: 0}
    assert compute_balances([], []) == {}


def test_uneven_division_sums_to_zero():
    expenses = [
        expense(1, ALICE, "10", (ALICE, BOB, CAROL)),
        expense(2, BOB, "7.01", (ALICE, BOB, CAROL)),
        expense(3, CAROL, "0.01", (ALICE, BOB, CAROL)),
        expense(4, ALICE, "99.99", (BOB, CAROL)),
    ]

    balances = compute_balances(PARTICIPANTS, expenses)

    assert abs(sum(balances.values())) < EPSILON


def test_empty_split_is_skipped():
    balances = compute_balances(
        PARTICIPANTS,
        [
            expense(1, ALICE, "30", ()),
            expense(2, BOB, "10", (ALICE, BOB)),
        ],
    )

    assert balances == {ALICE: Decimal("-5"), BOB: Decimal("5"), CAROL: Decimal("0")}


def test_duplicate_split_entry_is_debited_per_occurrence():
    balances = compute_balances(PARTICIPANTS[:2], [expense(1, ALICE, "30", (BOB, BOB, ALICE))])

    assert balances == {ALICE: Decimal("20"), BOB: Decimal("-20")}


def test_inputs_are_not_mutated_and_result_is_repeatable():
    expenses = [expense(1, ALICE, "30", (ALICE, BOB, CAROL))]
    participants = list(PARTICIPANTS)

    first = compute_balances(participants, expenses)
    second = compute_balances(participants, expenses)

    assert first == second
    assert first is not second
    assert participants == PARTICIPANTS
