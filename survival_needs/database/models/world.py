"""World clock model."""

from sqlalchemy import Float
from sqlalchemy.orm import Mapped, mapped_column

from survival_needs.database.models.base import Base, TimestampMixin


class WorldClockState(Base, TimestampMixin):
    """Tracks the world time shared by every character.

    A single row (id=1) is used.
    """

    __tablename__ = "world_clock"

    id: Mapped[int] = mapped_column(primary_key=True)
    world_time_seconds: Mapped[float] = mapped_column(
        Float,
        default=0.0,
        nullable=False,
        comment="Monotonically increasing world time in seconds",
    )

    def __repr__(self) -> str:
        return f"<WorldClockState t={self.world_time_seconds}>"
