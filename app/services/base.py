"""Shared persistence helpers for services."""

from collections.abc import Sequence
from typing import Any, TypeVar

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from app.exceptions import ConfigurationError
from app.models.base import utcnow

T = TypeVar("T")

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def get_by_id(db: Session, model: type[T], id: int | str) -> T | None:
    """Generic get by ID function."""
    return db.get(model, id)


def upsert(
    db: Session,
    model: type[T],
    values: dict[str, Any],
    conflict_columns: Sequence[str],
) -> T:
    """
    Insert a row, or update it in place when the unique key already exists.

    Runs as one ``INSERT ... ON CONFLICT (...) DO UPDATE`` statement, so
    there is no window between a failed insert and the follow-up update.
    Every supplied column except the conflict key is overwritten (last
    write wins); columns not supplied, such as ``created_at``, keep their
    stored value. Does not commit.

    Usage:
        account = upsert(db, SnapTradeAccount, row, ["snaptrade_account_id"])
    """
    dialect = db.get_bind().dialect.name
    insert = _INSERT_BY_DIALECT.get(dialect)
    if insert is None:
        raise ConfigurationError(f"Upsert is not supported on {dialect}")

    values = {**values, "updated_at": values.get("updated_at") or utcnow()}
    stmt = insert(model).values(**values)
    stmt = stmt.on_conflict_do_update(
        index_elements=list(conflict_columns),
        set_={
            key: stmt.excluded[key]
            for key in values
            if key not in conflict_columns
        },
    ).returning(model.id)  # type: ignore[attr-defined]

    row_id = db.execute(stmt).scalar_one()
    return db.get(model, row_id, populate_existing=True)
