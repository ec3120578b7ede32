from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass(slots=True, frozen=True)
class Group:
    id: int
    code: str
    created_at: Optional[datetime] = None


@dataclass(slots=True, frozen=True)
class Participant:
    id: int
    group_id: int
    name: str


@dataclass(slots=True, frozen=True)
class Expense:
    id: int
    group_id: int
    payer_id: int
    description: str
    amount: Decimal
    participant_ids: tuple[int, ...]
    created_at: Optional[datetime] = None


@dataclass(slots=True, frozen=True)
class GroupSnapshot:
    group: Group
    participants: tuple[Participant, ...] = field(default_factory=tuple)
    expenses: tuple[Expense, ...] = field(default_factory=tuple)

    def participant(self, participant_id: int) -> Optional[Participant]:
        for participant in self.participants:
            if participant.id == participant_id:
                return participant
        return None

    def names(self) -> dict[int, str]:
        return {participant.id: participant.name for participant in self.participants}
