import logging
import threading
from bisect import insort
from datetime import datetime, time
from typing import Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from models.db import PunchRecord, make_engine
from models.schema import DatabaseOperation, Punch, PunchType
from utils.date import DateLike, format_time, iso_day, to_date


class PunchStore:
    """Recorded punches keyed by ISO day, backed by the ``punches`` table.

    Reads hand out copies; the only way to change the map is through
    ``load``, ``insert``, ``remove`` and ``nuke``. One lock covers each database
    round trip together with the map update that follows it.
    """

    def __init__(self, engine: Engine):
        self._sessions = sessionmaker(bind=engine, expire_on_commit=False)
        self._punches: Dict[str, List[Punch]] = {}
        self._lock = threading.Lock()
        self.state = "unloaded"

    @classmethod
    def from_url(cls, database_url: str) -> "PunchStore":
        return cls(make_engine(database_url))

    def _session(self) -> Session:
        return self._sessions()

    def load(self, start: DateLike, end: DateLike) -> Dict[str, List[Punch]]:
        """Replace the map with the punches of ``[start, end]`` and return a copy of it."""
        first = datetime.combine(to_date(start), time.min)
        last = datetime.combine(to_date(end), time(23, 59))

        with self._lock:
            self.state = "loading"
            with self._session() as session:
                rows = session.scalars(
                    select(PunchRecord)
                    .where(PunchRecord.date >= first, PunchRecord.date <= last)
                    .order_by(PunchRecord.date)
                ).all()

            punches: Dict[str, List[Punch]] = {}
            for row in rows:
                punches.setdefault(row.date.date().isoformat(), []).append(_to_punch(row))

            self._punches = punches
            self.state = "loaded"
            loaded = self._copy()

        logging.info(f"Loaded {len(rows)} punches between {first.date()} and {last.date()}")
        return loaded

    def insert(self, at: datetime, punch_type: PunchType = PunchType.PUNCH) -> DatabaseOperation:
        at = _truncate(at)
        with self._lock:
            try:
                with self._session() as session, session.begin():
                    session.add(PunchRecord(date=at, type=punch_type.value))
            except IntegrityError:
                logging.warning(f"Duplicate punch at {at:%Y-%m-%d %H:%M}")
                return DatabaseOperation.DUPLICATE

            day_punches = self._punches.setdefault(at.date().isoformat(), [])
            insort(day_punches, Punch(type=punch_type, time=format_time(at)), key=lambda punch: punch.time)

        logging.info(f"Punch recorded at {at:%Y-%m-%d %H:%M} ({punch_type.value})")
        return DatabaseOperation.INSERTED

    def remove(self, at: datetime) -> Optional[DatabaseOperation]:
        at = _truncate(at)
        with self._lock:
            with self._session() as session, session.begin():
                deleted = session.execute(delete(PunchRecord).where(PunchRecord.date == at)).rowcount

            if deleted == 0:
                logging.warning(f"No punch to remove at {at:%Y-%m-%d %H:%M}")
                return None

            key = at.date().isoformat()
            remaining = [punch for punch in self._punches.get(key, []) if punch.time != format_time(at)]
            if remaining:
                self._punches[key] = remaining
            else:
                self._punches.pop(key, None)
        return DatabaseOperation.DELETED

    def nuke(self) -> None:
        with self._lock:
            with self._session() as session, session.begin():
                session.execute(delete(PunchRecord))
            self._punches = {}
        logging.warning("All punches deleted")

    def get_punches_for_date(self, day: DateLike) -> List[Punch]:
        key = iso_day(day)
        with self._lock:
            return list(self._punches.get(key, []))

    def snapshot(self) -> Dict[str, List[Punch]]:
        with self._lock:
            return self._copy()

    def _copy(self) -> Dict[str, List[Punch]]:
        return {day: list(punches) for day, punches in self._punches.items()}


def _truncate(at: datetime) -> datetime:
    return at.replace(second=0, microsecond=0, tzinfo=None)


def _to_punch(row: PunchRecord) -> Punch:
    return Punch(type=PunchType(row.type), time=format_time(row.date))
