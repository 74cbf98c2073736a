import logging
from typing import Any, Protocol, Sequence

from sqlalchemy.orm import Session

from app.core import config
from app.models.log_entry import LogEntry

logger = logging.getLogger(__name__)


def _parse_order(order: str) -> tuple[str, bool]:
    """'created_at ASC' -> ('created_at', False); descending flag second."""
    parts = order.split()
    field = parts[0]
    descending = len(parts) > 1 and parts[1].upper() == "DESC"
    return field, descending


class LogStore(Protocol):
    def get_events_select(
        self,
        filters: dict[str, Any],
        order: str = "created_at ASC",
        offset: int = 0,
        limit: int | None = None,
    ) -> Sequence[Any]: ...


class SqlLogStore:
    def __init__(self, db: Session):
        self.db = db

    def get_events_select(self, filters, order="created_at ASC", offset=0, limit=None):
        field, descending = _parse_order(order)
        column = getattr(LogEntry, field)

        q = self.db.query(LogEntry).filter_by(**filters)
        q = q.order_by(column.desc() if descending else column.asc(), LogEntry.id.asc())
        if offset:
            q = q.offset(offset)
        if limit:
            q = q.limit(limit)
        return q.all()


class InMemoryLogStore:
    def __init__(self, entries: list[Any] | None = None):
        self.entries = list(entries or [])

    def add(self, entry: Any) -> None:
        self.entries.append(entry)

    def get_events_select(self, filters, order="created_at ASC", offset=0, limit=None):
        field, descending = _parse_order(order)
        matches = [
            e for e in self.entries
            if all(getattr(e, k) == v for k, v in filters.items())
        ]
        matches.sort(key=lambda e: getattr(e, field), reverse=descending)
        end = offset + limit if limit else None
        return matches[offset:end]


def get_analytics_logstore(db: Session) -> LogStore | None:
    if config.ANALYTICS_LOGSTORE == "database":
        return SqlLogStore(db)
    if config.ANALYTICS_LOGSTORE:
        logger.warning("Unknown analytics log store '%s'", config.ANALYTICS_LOGSTORE)
    return None
