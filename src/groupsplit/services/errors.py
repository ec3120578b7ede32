from __future__ import annotations


class GroupSplitError(Exception):
    """Base class for errors that are reported back to the user as-is."""


class ValidationError(GroupSplitError, ValueError):
    pass


class NotFoundError(GroupSplitError, LookupError):
    pass


class GroupNotFoundError(NotFoundError):
    def __init__(self, code: str) -> None:
        super().__init__(f"Group {code!r} does not exist.")
        self.code = code


class ParticipantNotFoundError(NotFoundError):
    def __init__(self, participant: object) -> None:
        super().__init__(f"Participant {participant} not found.")
        self.participant = participant


class ExpenseNotFoundError(NotFoundError):
    def __init__(self, expense_id: int) -> None:
        super().__init__(f"Expense #{expense_id} not found.")
        self.expense_id = expense_id


class ConflictError(GroupSplitError):
    pass


class DuplicateNameError(ConflictError):
    def __init__(self, name: str) -> None:
        super().__init__(f"A participant named {name!r} already exists in this group.")
        self.name = name


class ParticipantInUseError(ConflictError):
    def __init__(self, name: str) -> None:
        super().__init__(f"{name} paid for at least one expense and cannot be removed.")
        self.name = name


class GroupCodeTakenError(ConflictError):
    def __init__(self, code: str) -> None:
        super().__init__(f"Group code {code!r} is already in use.")
        self.code = code


class GroupCodeUnavailableError(GroupSplitError):
    def __init__(self, attempts: int) -> None:
        super().__init__(f"Could not allocate a free group code after {attempts} attempts.")
        self.attempts = attempts
