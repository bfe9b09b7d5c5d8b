from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from termplan.db.base import Base
from termplan.db.models._mixins import TimestampMixin


class AppSnapshot(Base, TimestampMixin):
    """Whole application state stored as one JSON document per storage key."""

    __tablename__ = "app_snapshot"

    storage_key: Mapped[str] = mapped_column(String(64), primary_key=True)
    payload: Mapped[dict] = mapped_column(JSON)
