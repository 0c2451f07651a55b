"""
SQLAlchemy-backed inventory store.

Every public method opens its own short session and returns pydantic
InventoryRecord objects, so callers never hold live ORM rows between the
read and the write of a read-decide-write cycle. Writes can carry the
version the caller read; a mismatch raises ConflictError instead of
overwriting.
"""

import logging
from dataclasses import dataclass
from typing import Any, Literal

from sqlalchemy import Column, DateTime, Integer, String, create_engine, func, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from core import settings
from core.errors import ConflictError, NotFoundError, StoreError
from core.models import InventoryFields, InventoryRecord

logger = logging.getLogger(__name__)

Base = declarative_base()


class InventoryRow(Base):
    """One SKU record. Stock columns are never negative at rest."""

    __tablename__ = "inventory"

    id = Column(Integer, primary_key=True)
    product_name = Column(String, nullable=False, default="")
    local_name = Column(String, nullable=False, default="")
    sku = Column(String, nullable=False, default="", index=True)

    sellable_stock = Column(Integer, nullable=False, default=0)
    unusable_stock = Column(Integer, nullable=False, default=0)
    hold_stock = Column(Integer, nullable=False, default=0)

    design = Column(String, nullable=False, default="")
    color = Column(String, nullable=False, default="")
    supplier = Column(String, nullable=False, default="")
    reorder_level = Column(Integer, nullable=False, default=settings.DEFAULT_REORDER_LEVEL)

    # Optimistic concurrency token
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, nullable=False, default=func.now())

    def __repr__(self):
        return f"<InventoryRow(id={self.id}, sku='{self.sku}', sellable={self.sellable_stock})>"


FILTERABLE_FIELDS = {
    "product_name",
    "local_name",
    "sku",
    "design",
    "color",
    "supplier",
    "sellable_stock",
    "unusable_stock",
    "hold_stock",
    "reorder_level",
}


@dataclass(frozen=True)
class RecordFilter:
    """A single equality (`eq`) or case-insensitive substring (`ilike`) condition."""

    field: str
    value: Any
    mode: Literal["eq", "ilike"] = "eq"


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class InventoryStore:
    """
    CRUD access to the inventory table.

    Usage:
        store = InventoryStore("sqlite:///inventory.db")
        record = store.insert(InventoryFields(product_name="Red Saree", sku="RS-1"))
        store.update(record.id, {"sellable_stock": 4}, expected_version=record.version)
    """

    def __init__(self, database_url: str | None = None, engine: Engine | None = None):
        self.database_url = database_url or settings.DATABASE_URL
        self.engine = engine or create_engine(self.database_url, echo=False)
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        Base.metadata.create_all(self.engine)

    @property
    def identity(self) -> str:
        return self.engine.url.render_as_string(hide_password=True)

    # --- Reads ---

    def list(self, record_filter: RecordFilter | None = None) -> list[InventoryRecord]:
        """All records, newest created first, optionally narrowed by one filter."""
        stmt = select(InventoryRow).order_by(
            InventoryRow.created_at.desc(), InventoryRow.id.desc()
        )
        if record_filter is not None:
            stmt = stmt.where(self._condition(record_filter))

        try:
            with self._session_factory() as session:
                rows = session.scalars(stmt).all()
        except SQLAlchemyError as e:
            raise StoreError(f"Could not list inventory: {e}") from e
        return [InventoryRecord.model_validate(row) for row in rows]

    def get(self, record_id: int) -> InventoryRecord | None:
        try:
            with self._session_factory() as session:
                row = session.get(InventoryRow, record_id)
        except SQLAlchemyError as e:
            raise StoreError(f"Could not read record {record_id}: {e}") from e
        return InventoryRecord.model_validate(row) if row else None

    def get_one(self, field: str, value: Any) -> InventoryRecord | None:
        """First record (oldest wins) whose `field` equals `value`."""
        return self._first(RecordFilter(field, value, "eq"))

    def find_by_name(self, fragment: str) -> InventoryRecord | None:
        """
        First record (oldest wins) whose product name contains `fragment`, ignoring case.

        Names are compared with str.casefold() in Python. SQLite's lower()
        only folds ASCII, so ilike would miss names like "Étoile".
        """
        needle = (fragment or "").casefold()
        if not needle:
            return None

        stmt = select(InventoryRow).order_by(InventoryRow.id.asc())
        try:
            with self._session_factory() as session:
                for row in session.scalars(stmt):
                    if needle in (row.product_name or "").casefold():
                        return InventoryRecord.model_validate(row)
        except SQLAlchemyError as e:
            raise StoreError(f"Could not look up product name {fragment!r}: {e}") from e
        return None

    def _first(self, record_filter: RecordFilter) -> InventoryRecord | None:
        stmt = (
            select(InventoryRow)
            .where(self._condition(record_filter))
            .order_by(InventoryRow.id.asc())
            .limit(1)
        )
        try:
            with self._session_factory() as session:
                row = session.scalars(stmt).first()
        except SQLAlchemyError as e:
            raise StoreError(
                f"Could not look up {record_filter.field}={record_filter.value!r}: {e}"
            ) from e
        return InventoryRecord.model_validate(row) if row else None

    def _condition(self, record_filter: RecordFilter):
        if record_filter.field not in FILTERABLE_FIELDS:
            raise StoreError(f"Cannot filter on '{record_filter.field}'")

        column = getattr(InventoryRow, record_filter.field)
        if record_filter.mode == "eq":
            return column == record_filter.value
        if record_filter.mode == "ilike":
            pattern = f"%{_escape_like(str(record_filter.value))}%"
            return column.ilike(pattern, escape="\\")
        raise StoreError(f"Unknown filter mode '{record_filter.mode}'")

    # --- Writes ---

    def insert(self, fields: InventoryFields) -> InventoryRecord:
        row = InventoryRow(**fields.model_dump(), version=1)
        try:
            with self._session_factory() as session:
                session.add(row)
                session.commit()
                session.refresh(row)
                record = InventoryRecord.model_validate(row)
        except SQLAlchemyError as e:
            raise StoreError(f"Could not insert '{fields.sku or fields.product_name}': {e}") from e

        logger.debug("Inserted record %s (sku=%r)", record.id, record.sku)
        return record

    def update(
        self,
        record_id: int,
        fields: dict[str, Any],
        expected_version: int | None = None,
    ) -> InventoryRecord:
        """
        Write a partial set of fields and bump the version.

        With `expected_version` the write is a compare-and-set: it only applies
        if nobody else wrote the record since it was read.
        """
        changes = self._validated_changes(record_id, fields)

        stmt = (
            update(InventoryRow)
            .where(InventoryRow.id == record_id)
            .values(**changes, version=InventoryRow.version + 1)
        )
        if expected_version is not None:
            stmt = stmt.where(InventoryRow.version == expected_version)

        try:
            with self._session_factory() as session:
                result = session.execute(stmt)
                if result.rowcount == 0:
                    session.rollback()
                    current = session.get(InventoryRow, record_id)
                    if current is None:
                        raise NotFoundError(f"Record {record_id} does not exist")
                    raise ConflictError(record_id, expected_version, current.version)
                session.commit()
                row = session.get(InventoryRow, record_id)
                session.refresh(row)
                record = InventoryRecord.model_validate(row)
        except SQLAlchemyError as e:
            raise StoreError(f"Could not update record {record_id}: {e}") from e

        logger.debug("Updated record %s to version %s", record_id, record.version)
        return record

    def _validated_changes(self, record_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        unknown = set(fields) - set(InventoryFields.model_fields)
        if unknown:
            raise StoreError(f"Cannot update {sorted(unknown)} on record {record_id}")
        if not fields:
            raise StoreError(f"Nothing to update on record {record_id}")

        # Run the partial change through the model to enforce non-negative stock
        try:
            validated = InventoryFields.model_validate(fields)
        except ValueError as e:
            raise StoreError(f"Invalid values for record {record_id}: {e}") from e
        return {name: getattr(validated, name) for name in fields}

    def delete(self, record_id: int) -> None:
        try:
            with self._session_factory() as session:
                row = session.get(InventoryRow, record_id)
                if row is None:
                    raise NotFoundError(f"Record {record_id} does not exist")
                session.delete(row)
                session.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Could not delete record {record_id}: {e}") from e

        logger.debug("Deleted record %s", record_id)
