"""Group service: validation and orchestration around the repository.

Everything that reaches the balance calculator has been validated here:
amounts are positive with at most two decimals, splits are non-empty and
de-duplicated, and payer and split members belong to the group.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional, Protocol, Sequence

from groupsplit.db.models import Expense, Group, GroupSnapshot, Participant
from groupsplit.logging import get_logger
from groupsplit.services.balances import compute_balances
from groupsplit.services.codes import generate_group_code
from groupsplit.services.errors import (
    DuplicateNameError,
    ExpenseNotFoundError,
    GroupCodeTakenError,
    GroupCodeUnavailableError,
    GroupNotFoundError,
    ParticipantInUseError,
    ParticipantNotFoundError,
    ValidationError,
)
from groupsplit.services.settlement import Transfer, compute_transfers
from groupsplit.utils.parse import normalize_code, parse_amount

DEFAULT_DESCRIPTION = "Expense"
ALL_PARTICIPANTS = "all"


class Repository(Protocol):
    async def create_group(self, code: str) -> Group: ...

    async def get_group_by_code(self, code: str) -> Optional[Group]: ...

    async def delete_group(self, group_id: int) -> None: ...

    async def add_participant(self, group_id: int, name: str) -> Participant: ...

    async def delete_participant(self, group_id: int, participant_id: int) -> bool: ...

    async def add_expense(
        self,
        group_id: int,
        payer_id: int,
        description: str,
        amount: Decimal,
        participant_ids: Sequence[int],
    ) -> Expense: ...

    async def delete_expense(self, group_id: int, expense_id: int) -> bool: ...

    async def fetch_snapshot(self, group: Group) -> GroupSnapshot: ...


@dataclass(slots=True, frozen=True)
class SettlementView:
    snapshot: GroupSnapshot
    balances: dict[int, Decimal]
    transfers: list[Transfer]

    @property
    def has_expenses(self) -> bool:
        return bool(self.snapshot.expenses)

    @property
    def is_settled(self) -> bool:
        return self.has_expenses and not self.transfers


def dedupe(ids: Iterable[int]) -> list[int]:
    seen: set[int] = set()
    result: list[int] = []
    for pid in ids:
        if pid not in seen:
            seen.add(pid)
            result.append(pid)
    return result


def _clean_name(name: str) -> str:
    clean = " ".join(name.split())
    if not clean:
        raise ValidationError("Participant name must not be empty.")
    return clean


def resolve_participants(names: Sequence[str], participants: Sequence[Participant]) -> list[int]:
    """Map user-typed names to participant ids, case-insensitively.

    An empty list or the single word "all" selects every participant.
    """
    if not names or (len(names) == 1 and names[0].lower() == ALL_PARTICIPANTS):
        return [participant.id for participant in participants]

    # same folding as the lower(name) unique index
    by_name = {participant.name.lower(): participant.id for participant in participants}
    ids: list[int] = []
    unknown: list[str] = []
    for name in names:
        pid = by_name.get(" ".join(name.split()).lower())
        if pid is None:
            unknown.append(name)
        else:
            ids.append(pid)
    if unknown:
        raise ValidationError(f"Unknown participant(s): {', '.join(unknown)}.")
    return ids


class GroupService:
    def __init__(self, repo: Repository, code_length: int = 8, code_attempts: int = 5) -> None:
        self.repo = repo
        self.code_length = code_length
        self.code_attempts = code_attempts
        self._log = get_logger(__name__)

    async def create_group(self) -> Group:
        for attempt in range(1, self.code_attempts + 1):
            code = generate_group_code(self.code_length)
            try:
                group = await self.repo.create_group(code)
            except GroupCodeTakenError:
                self._log.info("group.code.collision", attempt=attempt)
                continue
            self._log.info("group.created", group_id=group.id, code=group.code)
            return group
        self._log.error("group.code.exhausted", attempts=self.code_attempts)
        raise GroupCodeUnavailableError(self.code_attempts)

    async def get_group(self, code: str) -> Group:
        normalized = normalize_code(code)
        if normalized is None:
            raise GroupNotFoundError(code)
        group = await self.repo.get_group_by_code(normalized)
        if group is None:
            raise GroupNotFoundError(normalized)
        return group

    async def delete_group(self, code: str) -> None:
        group = await self.get_group(code)
        await self.repo.delete_group(group.id)
        self._log.info("group.deleted", group_id=group.id)

    async def snapshot(self, code: str) -> GroupSnapshot:
        group = await self.get_group(code)
        return await self.repo.fetch_snapshot(group)

    async def add_participant(self, code: str, name: str) -> Participant:
        clean = _clean_name(name)
        group = await self.get_group(code)
        participant = await self.repo.add_participant(group.id, clean)
        self._log.info("participant.added", group_id=group.id, participant_id=participant.id)
        return participant

    async def add_participants(self, code: str, names: Sequence[str]) -> list[Participant]:
        """Add several participants, or none of them.

        Every name is checked against the group and the rest of the batch
        before the first insert.
        """
        cleaned = [_clean_name(name) for name in names]
        if not cleaned:
            raise ValidationError("Participant name must not be empty.")
        group = await self.get_group(code)
        snapshot = await self.repo.fetch_snapshot(group)
        taken = {participant.name.lower() for participant in snapshot.participants}
        for name in cleaned:
            if name.lower() in taken:
                raise DuplicateNameError(name)
            taken.add(name.lower())

        added: list[Participant] = []
        for name in cleaned:
            participant = await self.repo.add_participant(group.id, name)
            self._log.info("participant.added", group_id=group.id, participant_id=participant.id)
            added.append(participant)
        return added

    async def remove_participant(self, code: str, participant_id: int) -> Participant:
        group = await self.get_group(code)
        snapshot = await self.repo.fetch_snapshot(group)
        participant = snapshot.participant(participant_id)
        if participant is None:
            raise ParticipantNotFoundError(f"#{participant_id}")
        if any(expense.payer_id == participant_id for expense in snapshot.expenses):
            raise ParticipantInUseError(participant.name)

        # the storage layer enforces the payer rule again under its own lock
        if not await self.repo.delete_participant(group.id, participant_id):
            raise ParticipantNotFoundError(f"#{participant_id}")
        self._log.info("participant.removed", group_id=group.id, participant_id=participant_id)
        return participant

    async def add_expense(
        self,
        code: str,
        payer_id: int,
        amount: str | int | Decimal,
        participant_ids: Sequence[int],
        description: Optional[str] = None,
    ) -> Expense:
        value = parse_amount(amount)
        split = dedupe(participant_ids)
        if not split:
            raise ValidationError("Select at least one participant to split the expense with.")

        group = await self.get_group(code)
        snapshot = await self.repo.fetch_snapshot(group)
        known = {participant.id for participant in snapshot.participants}
        if payer_id not in known:
            raise ValidationError("The payer is not a participant of this group.")
        strangers = [pid for pid in split if pid not in known]
        if strangers:
            raise ValidationError("Some participants of the split are not in this group.")

        text = " ".join((description or "").split()) or DEFAULT_DESCRIPTION
        expense = await self.repo.add_expense(group.id, payer_id, text, value, split)
        self._log.info(
            "expense.added",
            group_id=group.id,
            expense_id=expense.id,
            amount=str(value),
            split=len(split),
        )
        return expense

    async def remove_expense(self, code: str, expense_id: int) -> None:
        group = await self.get_group(code)
        if not await self.repo.delete_expense(group.id, expense_id):
            raise ExpenseNotFoundError(expense_id)
        self._log.info("expense.removed", group_id=group.id, expense_id=expense_id)

    async def settlement(self, code: str) -> SettlementView:
        snapshot = await self.snapshot(code)
        balances = compute_balances(snapshot.participants, snapshot.expenses)
        transfers = compute_transfers(balances)
        return SettlementView(snapshot=snapshot, balances=balances, transfers=transfers)
