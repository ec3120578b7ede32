"""Per-chat-user selection of the active group."""

from __future__ import annotations

from typing import Optional

from groupsplit.services.errors import ValidationError


class GroupSessions:
    def __init__(self) -> None:
        self._current_group: dict[int, str] = {}

    def set_current_group(self, user_id: int, code: str) -> None:
        self._current_group[user_id] = code

    def get_current_group(self, user_id: int) -> Optional[str]:
        return self._current_group.get(user_id)

    def clear_current_group(self, user_id: int) -> None:
        self._current_group.pop(user_id, None)

    def forget_group(self, code: str) -> None:
        for user_id in [uid for uid, current in self._current_group.items() if current == code]:
            del self._current_group[user_id]


def require_current_group(sessions: GroupSessions, user_id: int) -> str:
    code = sessions.get_current_group(user_id)
    if code is None:
        raise ValidationError("No active group. Create one with /newgroup or open one with /group <code>.")
    return code
