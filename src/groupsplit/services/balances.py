from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from groupsplit.db.models import Expense, Participant
from groupsplit.logging import get_logger
from groupsplit.services.tolerance import ZERO

log = get_logger(__name__)


def compute_balances(
    participants: Sequence[Participant],
    expenses: Sequence[Expense],
) -> dict[int, Decimal]:
    """Net balance per participant id: positive is owed money, negative owes.

    Every participant is present, at zero when untouched by any expense. The
    payer is credited the full amount and each entry of the split is debited
    one even share, so an id listed twice is debited twice.
    """
    balances: dict[int, Decimal] = {participant.id: ZERO for participant in participants}

    for expense in expenses:
        split = expense.participant_ids
        if not split:
            log.debug("balances.expense.skipped", expense_id=expense.id, reason="empty_split")
            continue

        share = expense.amount / Decimal(len(split))
        balances[expense.payer_id] = balances.get(expense.payer_id, ZERO) + expense.amount
        for participant_id in split:
            balances[participant_id] = balances.get(participant_id, ZERO) - share

    return balances
