from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Mapping

from groupsplit.logging import get_logger
from groupsplit.services.tolerance import EPSILON, is_settled, total

log = get_logger(__name__)


@dataclass(slots=True, frozen=True)
class Transfer:
    from_participant: int
    to_participant: int
    amount: Decimal


def compute_transfers(balances: Mapping[int, Decimal]) -> List[Transfer]:
    """Greedy plan of payments that brings every balance within ``EPSILON`` of zero.

    Each round the largest debtor pays the largest creditor the smaller of the
    two magnitudes, which settles at least one of them. Equal magnitudes are
    resolved lowest id first. Transfers are returned in the order they are
    decided.
    """
    balance_total = total(balances.values())
    if not is_settled(balance_total):
        log.warning("settlement.inconsistent", total=str(balance_total), participants=len(balances))

    remaining = {pid: value for pid, value in balances.items() if not is_settled(value)}
    transfers: list[Transfer] = []

    # at most one participant drops out per round
    for _ in range(len(remaining)):
        debtors = [pid for pid, value in remaining.items() if value < 0]
        creditors = [pid for pid, value in remaining.items() if value > 0]
        if not debtors or not creditors:
            break

        debtor = min(debtors, key=lambda pid: (remaining[pid], pid))
        creditor = min(creditors, key=lambda pid: (-remaining[pid], pid))

        amount = min(-remaining[debtor], remaining[creditor])
        if amount >= EPSILON:
            transfers.append(Transfer(from_participant=debtor, to_participant=creditor, amount=amount))

        remaining[debtor] += amount
        remaining[creditor] -= amount
        for pid in (debtor, creditor):
            if is_settled(remaining[pid]):
                del remaining[pid]

    if remaining:
        log.warning(
            "settlement.unresolved",
            leftover={str(pid): str(value) for pid, value in remaining.items()},
        )

    return transfers
