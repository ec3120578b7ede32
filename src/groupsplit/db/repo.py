from __future__ import annotations

from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Any, AsyncIterator, Mapping, Optional, Sequence

import asyncpg

from groupsplit.db.models import Expense, Group, GroupSnapshot, Participant
from groupsplit.logging import get_logger, sql_logger
from groupsplit.services.errors import DuplicateNameError, GroupCodeTakenError, ParticipantInUseError


class Database:
    def __init__(self, dsn: str) -> None:
        self._dsn = dsn
        self._pool: asyncpg.Pool | None = None
        self._log = get_logger(__name__)

    async def connect(self) -> None:
        if self._pool is None:
            # asyncpg expects a plain postgresql:// scheme, without "+asyncpg"
            dsn = self._dsn.replace("+asyncpg", "")
            self._pool = await asyncpg.create_pool(dsn)
            self._log.info("db.pool.created")

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            self._log.info("db.pool.closed")

    async def fetchrow(self, query: str, *args: Any) -> asyncpg.Record | None:
        await self._ensure_pool()
        assert self._pool
        sql_logger.info("sql.fetchrow", query=query, args=args)
        return await self._pool.fetchrow(query, *args)

    async def execute(self, query: str, *args: Any) -> str:
        await self._ensure_pool()
        assert self._pool
        sql_logger.info("sql.execute", query=query, args=args)
        return await self._pool.execute(query, *args)

    @asynccontextmanager
    async def transaction(self, isolation: str = "read_committed") -> AsyncIterator[asyncpg.Connection]:
        await self._ensure_pool()
        assert self._pool
        async with self._pool.acquire() as connection:
            sql_logger.info("sql.transaction", isolation=isolation)
            async with connection.transaction(isolation=isolation):
                yield connection

    async def _ensure_pool(self) -> None:
        if self._pool is None:
            await self.connect()


def _group(row: Mapping[str, Any]) -> Group:
    return Group(id=int(row["id"]), code=row["code"], created_at=row.get("created_at"))


def _participant(row: Mapping[str, Any]) -> Participant:
    return Participant(id=int(row["id"]), group_id=int(row["group_id"]), name=row["name"])


def _expense(row: Mapping[str, Any]) -> Expense:
    return Expense(
        id=int(row["id"]),
        group_id=int(row["group_id"]),
        payer_id=int(row["payer_id"]),
        description=row["description"],
        amount=Decimal(row["amount"]),
        participant_ids=tuple(int(pid) for pid in (row["participant_ids"] or ())),
        created_at=row.get("created_at"),
    )


_EXPENSES_QUERY = """
    SELECT e.*,
           COALESCE(
               array_agg(ep.participant_id ORDER BY ep.position)
                   FILTER (WHERE ep.participant_id IS NOT NULL),
               '{}'
           ) AS participant_ids
    FROM expenses e
    LEFT JOIN expense_participants ep ON ep.expense_id = e.id
    WHERE e.group_id = $1
    GROUP BY e.id
    ORDER BY e.created_at, e.id
"""


class GroupRepository:
    def __init__(self, db: Database) -> None:
        self.db = db

    async def create_group(self, code: str) -> Group:
        try:
            row = await self.db.fetchrow(
                "INSERT INTO groups (code) VALUES ($1) RETURNING *",
                code,
            )
        except asyncpg.UniqueViolationError as exc:
            raise GroupCodeTakenError(code) from exc
        assert row is not None
        return _group(row)

    async def get_group_by_code(self, code: str) -> Optional[Group]:
        row = await self.db.fetchrow("SELECT * FROM groups WHERE code = $1", code)
        return _group(row) if row else None

    async def delete_group(self, group_id: int) -> None:
        await self.db.execute("DELETE FROM groups WHERE id = $1", group_id)

    async def add_participant(self, group_id: int, name: str) -> Participant:
        try:
            row = await self.db.fetchrow(
                """
                INSERT INTO participants (group_id, name)
                VALUES ($1, $2)
                RETURNING *
                """,
                group_id,
                name,
            )
        except asyncpg.UniqueViolationError as exc:
            raise DuplicateNameError(name) from exc
        assert row is not None
        return _participant(row)

    async def delete_participant(self, group_id: int, participant_id: int) -> bool:
        """Delete a participant and drop them from every split.

        Payers are protected by the ``ON DELETE RESTRICT`` foreign key on
        ``expenses.payer_id``.
        """
        async with self.db.transaction() as connection:
            row = await connection.fetchrow(
                "SELECT * FROM participants WHERE group_id = $1 AND id = $2 FOR UPDATE",
                group_id,
                participant_id,
            )
            if row is None:
                return False
            try:
                sql_logger.info("sql.execute", query="DELETE FROM participants", args=(participant_id,))
                await connection.execute("DELETE FROM participants WHERE id = $1", participant_id)
            except asyncpg.ForeignKeyViolationError as exc:
                raise ParticipantInUseError(row["name"]) from exc
        return True

    async def add_expense(
        self,
        group_id: int,
        payer_id: int,
        description: str,
        amount: Decimal,
        participant_ids: Sequence[int],
    ) -> Expense:
        async with self.db.transaction() as connection:
            sql_logger.info("sql.fetchrow", query="INSERT INTO expenses", args=(group_id, payer_id, amount))
            row = await connection.fetchrow(
                """
                INSERT INTO expenses (group_id, payer_id, description, amount)
                VALUES ($1, $2, $3, $4)
                RETURNING *
                """,
                group_id,
                payer_id,
                description,
                amount,
            )
            assert row is not None
            await connection.executemany(
                """
                INSERT INTO expense_participants (expense_id, participant_id, position)
                VALUES ($1, $2, $3)
                """,
                [(row["id"], pid, position) for position, pid in enumerate(participant_ids)],
            )
        return Expense(
            id=int(row["id"]),
            group_id=group_id,
            payer_id=payer_id,
            description=row["description"],
            amount=Decimal(row["amount"]),
            participant_ids=tuple(participant_ids),
            created_at=row.get("created_at"),
        )

    async def delete_expense(self, group_id: int, expense_id: int) -> bool:
        status = await self.db.execute(
            "DELETE FROM expenses WHERE group_id = $1 AND id = $2",
            group_id,
            expense_id,
        )
        return status.endswith(" 1")

    async def fetch_snapshot(self, group: Group) -> GroupSnapshot:
        async with self.db.transaction(isolation="repeatable_read") as connection:
            sql_logger.info("sql.snapshot", group_id=group.id)
            participant_rows = await connection.fetch(
                "SELECT * FROM participants WHERE group_id = $1 ORDER BY id",
                group.id,
            )
            expense_rows = await connection.fetch(_EXPENSES_QUERY, group.id)
        return GroupSnapshot(
            group=group,
            participants=tuple(_participant(row) for row in participant_rows),
            expenses=tuple(_expense(row) for row in expense_rows),
        )
