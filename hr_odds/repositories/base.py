"""
Base repository class for data access layer.

The repository pattern provides:
1. Separation of data access logic from the ingestion jobs
2. Single place for query logic (easier to maintain)
3. Idempotent upserts keyed by each table's unique constraint
4. One place where driver errors become ``StoreError``

Example:
    class TeamRepository(BaseRepository[Team]):
        def upsert_teams(self, abbrs):
            return self.upsert([{"abbr": a, "team_id": a} for a in abbrs], ["abbr"])
"""
from typing import Any, Dict, Generic, Iterable, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import func, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hr_odds.core.exceptions import StoreError

T = TypeVar("T")


def store_error(exc: SQLAlchemyError) -> StoreError:
    """Wrap a SQLAlchemy error, keeping the driver's message when there is one."""
    message = str(getattr(exc, "orig", None) or exc)
    return StoreError(message)


class BaseRepository(Generic[T]):
    """
    Base repository providing upsert, insert and query helpers.

    Attributes:
        model_type: The SQLAlchemy model class this repository manages
        db: The database session
    """

    def __init__(self, model_type: Type[T], db: Session):
        self.model_type = model_type
        self.db = db

    @property
    def table(self):
        return self.model_type.__table__

    # ========================================================================
    # Writes
    # ========================================================================

    def _dialect_insert(self):
        """INSERT construct that supports ON CONFLICT for the bound dialect."""
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert as dialect_insert
        elif dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert as dialect_insert
        else:
            raise StoreError(f"Upsert is not supported on the {dialect} dialect")
        return dialect_insert(self.table)

    def upsert(
        self,
        rows: Sequence[Dict[str, Any]],
        conflict_columns: Sequence[str],
        update_columns: Optional[Iterable[str]] = None,
        keep_existing_when_null: Iterable[str] = (),
    ) -> int:
        """
        Insert rows, updating them in place when the unique key already exists.

        Args:
            rows: Column dictionaries (all rows share the same keys)
            conflict_columns: Columns of the unique constraint to resolve on
            update_columns: Columns to overwrite on conflict (default: every
                non-key column present in the rows)
            keep_existing_when_null: Columns whose stored value is kept when
                the incoming value is NULL

        Returns:
            Number of rows sent

        Raises:
            StoreError: The statement failed
        """
        if not rows:
            return 0

        stmt = self._dialect_insert().values(list(rows))

        if update_columns is None:
            update_columns = [c for c in rows[0] if c not in conflict_columns]
        keep = set(keep_existing_when_null)

        update_set = {}
        for column in update_columns:
            if column in keep:
                update_set[column] = func.coalesce(stmt.excluded[column], self.table.c[column])
            else:
                update_set[column] = stmt.excluded[column]

        if update_set:
            stmt = stmt.on_conflict_do_update(index_elements=list(conflict_columns), set_=update_set)
        else:
            stmt = stmt.on_conflict_do_nothing(index_elements=list(conflict_columns))

        try:
            self.db.execute(stmt)
        except SQLAlchemyError as e:
            raise store_error(e) from e
        return len(rows)

    def insert(self, rows: Sequence[Dict[str, Any]]) -> int:
        """Plain INSERT of one or more rows; returns the number of rows sent."""
        if not rows:
            return 0
        try:
            self.db.execute(insert(self.table), list(rows))
        except SQLAlchemyError as e:
            raise store_error(e) from e
        return len(rows)

    def execute(self, statement):
        """Execute a statement, converting driver errors to StoreError."""
        try:
            return self.db.execute(statement)
        except SQLAlchemyError as e:
            raise store_error(e) from e

    # ========================================================================
    # Reads
    # ========================================================================

    def where(self, *criterion) -> List[T]:
        """Filter records using SQLAlchemy expressions."""
        return list(self.db.scalars(select(self.model_type).where(*criterion)))

    # ========================================================================
    # Transaction control
    # ========================================================================

    def save(self) -> None:
        """Commit pending changes to the database."""
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise store_error(e) from e

    def rollback(self) -> None:
        """Rollback pending changes."""
        self.db.rollback()
