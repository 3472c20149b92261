"""
Persistence gateway: row-level CRUD over named tables, scoped by owner.

Every successful write publishes a typed ChangeEvent to subscribers, so list
views can refresh without polling.
"""

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from financeai.errors import GatewayError, RecordNotFound
from financeai.models import TABLES

logger = logging.getLogger(__name__)

# Columns owned by the gateway, never written from caller values
PROTECTED_COLUMNS = {"id", "user_id", "created_at", "updated_at"}


@dataclass
class ChangeEvent:
    """Structured change notification"""
    table: str
    action: str  # 'insert', 'update', 'delete'
    user_id: str
    row_id: int
    record: Optional[Dict[str, Any]] = None
    timestamp: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class Subscription:
    def __init__(self, gateway: "PersistenceGateway", callback: Callable[[ChangeEvent], None],
                 table: Optional[str] = None, user_id: Optional[str] = None):
        self._gateway = gateway
        self.callback = callback
        self.table = table
        self.user_id = user_id
        self.active = True

    def matches(self, event: ChangeEvent) -> bool:
        if self.table is not None and event.table != self.table:
            return False
        if self.user_id is not None and event.user_id != self.user_id:
            return False
        return True

    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self._gateway._remove(self)


def to_record(row) -> Dict[str, Any]:
    return {column.name: getattr(row, column.name) for column in row.__table__.columns}


class PersistenceGateway:
    def __init__(self, session_factory):
        self.session_factory = session_factory
        self._subscriptions: List[Subscription] = []
        self._lock = threading.Lock()

    # Table addressing

    def _model(self, table: str):
        model = TABLES.get(table)
        if model is None:
            raise GatewayError(f"Unknown table: {table}", status_code=400)
        return model

    def _check_columns(self, model, names) -> None:
        columns = set(model.__table__.columns.keys())
        unknown = [name for name in names if name not in columns]
        if unknown:
            raise GatewayError(
                f"Unknown column(s) for {model.__tablename__}: {', '.join(sorted(unknown))}",
                status_code=400
            )

    def _writable(self, model, values: Dict[str, Any]) -> Dict[str, Any]:
        values = {k: v for k, v in values.items() if k not in PROTECTED_COLUMNS}
        self._check_columns(model, values.keys())
        return values

    @contextmanager
    def _session(self, action: str, table: str):
        session = self.session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Gateway {action} on {table} failed: {e}")
            raise GatewayError(f"Failed to {action} {table}") from e
        finally:
            session.close()

    # Reads

    def select(self, table: str, user_id: str, order_by: Optional[str] = None,
               descending: bool = False, limit: Optional[int] = None,
               offset: int = 0, **filters) -> List[Dict[str, Any]]:
        """Rows owned by user_id matching the non-None filters"""
        model = self._model(table)
        filters = {k: v for k, v in filters.items() if v is not None}
        self._check_columns(model, list(filters) + ([order_by] if order_by else []))

        with self._session("select", table) as session:
            query = session.query(model).filter(model.user_id == user_id)
            for name, value in filters.items():
                query = query.filter(getattr(model, name) == value)
            if order_by:
                column = getattr(model, order_by)
                if descending:
                    query = query.order_by(column.desc(), model.id.desc())
                else:
                    query = query.order_by(column.asc(), model.id.asc())
            if offset:
                query = query.offset(offset)
            if limit is not None:
                query = query.limit(limit)
            return [to_record(row) for row in query.all()]

    def count(self, table: str, user_id: str, **filters) -> int:
        model = self._model(table)
        filters = {k: v for k, v in filters.items() if v is not None}
        self._check_columns(model, filters)

        with self._session("count", table) as session:
            query = session.query(model).filter(model.user_id == user_id)
            for name, value in filters.items():
                query = query.filter(getattr(model, name) == value)
            return query.count()

    def first(self, table: str, user_id: str, **filters) -> Optional[Dict[str, Any]]:
        rows = self.select(table, user_id, limit=1, **filters)
        return rows[0] if rows else None

    def get(self, table: str, user_id: str, row_id: int) -> Dict[str, Any]:
        record = self.first(table, user_id, id=row_id)
        if record is None:
            raise RecordNotFound(table, row_id)
        return record

    # Writes

    def insert(self, table: str, user_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        model = self._model(table)
        values = self._writable(model, values)

        with self._session("insert", table) as session:
            row = model(user_id=user_id, **values)
            session.add(row)
            session.commit()
            session.refresh(row)
            record = to_record(row)

        logger.info(f"Inserted {table} record {record['id']} for user {user_id}")
        self._publish(ChangeEvent(table, "insert", user_id, record["id"], record))
        return record

    def update(self, table: str, user_id: str, row_id: int, values: Dict[str, Any]) -> Dict[str, Any]:
        model = self._model(table)
        values = self._writable(model, values)

        with self._session("update", table) as session:
            row = session.query(model).filter(model.id == row_id, model.user_id == user_id).first()
            if row is None:
                raise RecordNotFound(table, row_id)
            for name, value in values.items():
                setattr(row, name, value)
            session.commit()
            session.refresh(row)
            record = to_record(row)

        self._publish(ChangeEvent(table, "update", user_id, row_id, record))
        return record

    def upsert_single(self, table: str, user_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        """Insert or update the one row an owner has in a one-per-owner table"""
        existing = self.first(table, user_id)
        if existing is None:
            return self.insert(table, user_id, values)
        return self.update(table, user_id, existing["id"], values)

    def delete(self, table: str, user_id: str, row_id: int) -> None:
        model = self._model(table)

        with self._session("delete", table) as session:
            row = session.query(model).filter(model.id == row_id, model.user_id == user_id).first()
            if row is None:
                raise RecordNotFound(table, row_id)
            session.delete(row)
            session.commit()

        logger.info(f"Deleted {table} record {row_id} for user {user_id}")
        self._publish(ChangeEvent(table, "delete", user_id, row_id))

    # Change notifications

    def subscribe(self, callback: Callable[[ChangeEvent], None], table: Optional[str] = None,
                  user_id: Optional[str] = None) -> Subscription:
        if table is not None:
            self._model(table)
        subscription = Subscription(self, callback, table=table, user_id=user_id)
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    def _publish(self, event: ChangeEvent) -> None:
        with self._lock:
            targets = [s for s in self._subscriptions if s.matches(event)]
        for subscription in targets:
            try:
                subscription.callback(event)
            except Exception as e:
                logger.error(f"Change subscriber failed for {event.table}/{event.action}: {e}")
