"""Keyed storage for scheduled status moves."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from boardwatch.db import get_session
from boardwatch.models import ScheduledMove

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

logger = structlog.get_logger()


class ScheduleStore:
    """Holds at most one ``ScheduledMove`` per project item id.

    Concurrent writers for the same item resolve last-write-wins.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def put(self, move: ScheduledMove) -> None:
        """Insert the move, replacing any existing one for the same item."""
        with get_session(self._engine) as session:
            session.merge(move)
            session.commit()
        logger.info(
            "schedule.stored",
            item_id=move.item_id,
            date=move.scheduled_date.isoformat(),
            status=move.target_value_name,
        )

    def delete(self, item_id: str) -> bool:
        """Remove the move for ``item_id``.  Returns False if there was none."""
        with get_session(self._engine) as session:
            move = session.get(ScheduledMove, item_id)
            if move is None:
                logger.info("schedule.delete_absent", item_id=item_id)
                return False
            session.delete(move)
            session.commit()
        logger.info("schedule.deleted", item_id=item_id)
        return True

    def get(self, item_id: str) -> ScheduledMove | None:
        with get_session(self._engine) as session:
            return session.get(ScheduledMove, item_id)
