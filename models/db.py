from datetime import datetime

from sqlalchemy import DateTime, Index, String, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.pool import StaticPool

from models.schema import PunchType


class Base(DeclarativeBase):
    pass


class PunchRecord(Base):
    """One row per clock event; ``date`` is minute-precision and unique."""

    __tablename__ = "punches"
    __table_args__ = (Index("idx_punches_date", "date"),)

    date: Mapped[datetime] = mapped_column(DateTime, primary_key=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default=PunchType.PUNCH.value)


def make_engine(database_url: str, echo: bool = False) -> Engine:
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        # a single shared connection so the in-memory database survives across threads
        engine = create_engine(
            database_url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_engine(database_url, echo=echo)
    Base.metadata.create_all(engine)
    return engine
