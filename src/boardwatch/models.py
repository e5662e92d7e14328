"""Database models for boardwatch."""

from __future__ import annotations

from datetime import date

from sqlmodel import Field, SQLModel


class ScheduledMove(SQLModel, table=True):
    """A pending status change for one project item.

    At most one move exists per item: scheduling again replaces it.
    """

    __tablename__ = "scheduled_moves"

    item_id: str = Field(primary_key=True)
    project_id: str
    scheduled_date: date = Field(index=True)
    field_id: str
    target_value_id: str
    target_value_name: str
    installation_id: int
    username: str
    comments_url: str
