from __future__ import annotations

from sqlalchemy.engine import make_url

SYNC_DRIVER = "postgresql+psycopg2"


def sync_database_url(raw: str) -> str:
    """URL for alembic's synchronous engine.

    A bare ``postgresql://`` lets SQLAlchemy choose the driver, and newer
    releases choose psycopg 3. Pin psycopg2, which is the driver we ship.
    """
    url = make_url(raw)
    if url.drivername in {"postgresql", "postgres", "postgresql+asyncpg"}:
        url = url.set(drivername=SYNC_DRIVER)
    return url.render_as_string(hide_password=False)

