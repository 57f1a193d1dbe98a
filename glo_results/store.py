from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .dates import request_key
from .db import create_session_factory, session_scope
from .errors import StorageError
from .models import Base, DrawRecord, PrizeNumber
from .types import CATEGORIES, CompleteDraw, DateRequest, NormalizedResult, Partition, PrizeCategory


class ResultStore:
    """Persistence for draws and their prize numbers.

    Writes are insert-or-ignore: saving the same result twice leaves the
    database unchanged. Every category of a draw is committed on its own, so
    a failure half way through a draw keeps the categories already written.
    """

    def __init__(self, engine: Engine, logger: Optional[logging.Logger] = None) -> None:
        self._engine = engine
        self._session_factory = create_session_factory(engine)
        self._insert = postgresql.insert if engine.dialect.name == "postgresql" else sqlite.insert
        self._logger = logger or logging.getLogger("glo_results.store")

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with session_scope(self._session_factory) as session:
                yield session
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc

    def ensure_schema(self) -> None:
        try:
            Base.metadata.create_all(self._engine)
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc

    # -- writes -----------------------------------------------------------

    def save(self, result: NormalizedResult) -> int:
        draw_id = self._upsert_draw(result.date, result.period_key())
        self._save_prize_numbers(draw_id, result.categories)
        self._logger.debug("Saved draw %s as id %s", result.date, draw_id)
        return draw_id

    def save_many(self, results: Iterable[NormalizedResult]) -> List[int]:
        return [self.save(result) for result in results]

    def _upsert_draw(self, draw_date: str, period: str) -> int:
        table = DrawRecord.__table__
        stmt = self._insert(table).values(draw_date=draw_date, period=period)
        # Assigning the key to itself keeps the existing row intact and still returns its id.
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.draw_date],
            set_={"draw_date": stmt.excluded.draw_date},
        ).returning(table.c.id)
        with self._session() as session:
            return int(session.execute(stmt).scalar_one())

    def _save_prize_numbers(self, draw_id: int, categories: Mapping[str, PrizeCategory]) -> None:
        table = PrizeNumber.__table__
        stmt = self._insert(table).on_conflict_do_nothing(
            index_elements=[
                table.c.draw_id,
                table.c.category,
                table.c.number_value,
                table.c.round_number,
            ]
        )
        for name in CATEGORIES:
            category = categories.get(name)
            if category is None or not category.numbers:
                continue
            rows = [
                {
                    "draw_id": draw_id,
                    "category": name,
                    "prize_amount": category.price,
                    "number_value": entry.value,
                    "round_number": entry.round,
                }
                for entry in category.numbers
            ]
            with self._session() as session:
                session.execute(stmt, rows)

    # -- existence --------------------------------------------------------

    def exists(self, draw_date: str) -> bool:
        with self._session() as session:
            row = session.query(DrawRecord.id).filter(DrawRecord.draw_date == draw_date).first()
            return row is not None

    def partition_by_existence(self, requests: Iterable[Sequence[str]]) -> Partition:
        partition = Partition()
        for raw in requests:
            request = DateRequest(*raw)
            key = request_key(request)
            if self.exists(key):
                partition.already_stored.append(key)
            else:
                partition.to_fetch.append(request)
        return partition

    # -- reads ------------------------------------------------------------

    @staticmethod
    def _detached(session: Session, records: List) -> List:
        session.expunge_all()
        return records

    def list_all(self) -> List[DrawRecord]:
        with self._session() as session:
            records = session.query(DrawRecord).order_by(DrawRecord.draw_date.desc()).all()
            return self._detached(session, records)

    def get_by_date(self, draw_date: str) -> Optional[DrawRecord]:
        with self._session() as session:
            record = session.query(DrawRecord).filter(DrawRecord.draw_date == draw_date).one_or_none()
            session.expunge_all()
            return record

    def get_by_date_range(self, start_date: str, end_date: str) -> List[DrawRecord]:
        with self._session() as session:
            records = (
                session.query(DrawRecord)
                .filter(DrawRecord.draw_date >= start_date, DrawRecord.draw_date <= end_date)
                .order_by(DrawRecord.draw_date.desc())
                .all()
            )
            return self._detached(session, records)

    def get_by_year(self, year: str) -> List[DrawRecord]:
        return self.get_by_date_range(f"{year}-01-01", f"{year}-12-31")

    def get_by_month(self, year: str, month: str) -> List[DrawRecord]:
        month = str(month).zfill(2)
        return self.get_by_date_range(f"{year}-{month}-01", f"{year}-{month}-31")

    def get_latest(self, limit: int = 10) -> List[DrawRecord]:
        with self._session() as session:
            records = (
                session.query(DrawRecord)
                .order_by(DrawRecord.draw_date.desc())
                .limit(limit)
                .all()
            )
            return self._detached(session, records)

    def get_after_date(self, draw_date: str, limit: Optional[int] = None) -> List[DrawRecord]:
        with self._session() as session:
            query = (
                session.query(DrawRecord)
                .filter(DrawRecord.draw_date >= draw_date)
                .order_by(DrawRecord.draw_date.desc())
            )
            if limit is not None:
                query = query.limit(limit)
            return self._detached(session, query.all())

    def get_before_date(self, draw_date: str, limit: Optional[int] = None) -> List[DrawRecord]:
        with self._session() as session:
            query = (
                session.query(DrawRecord)
                .filter(DrawRecord.draw_date <= draw_date)
                .order_by(DrawRecord.draw_date.desc())
            )
            if limit is not None:
                query = query.limit(limit)
            return self._detached(session, query.all())

    def get_prize_numbers(self, draw_id: int) -> List[PrizeNumber]:
        with self._session() as session:
            prizes = (
                session.query(PrizeNumber)
                .filter(PrizeNumber.draw_id == draw_id)
                .order_by(PrizeNumber.category, PrizeNumber.round_number)
                .all()
            )
            return self._detached(session, prizes)

    def get_prize_numbers_by_category(self, category: str) -> List[PrizeNumber]:
        with self._session() as session:
            prizes = (
                session.query(PrizeNumber)
                .join(DrawRecord, PrizeNumber.draw_id == DrawRecord.id)
                .filter(PrizeNumber.category == category)
                .order_by(DrawRecord.draw_date.desc(), PrizeNumber.round_number)
                .all()
            )
            return self._detached(session, prizes)

    def search_number(self, number: str) -> List[Tuple[DrawRecord, PrizeNumber]]:
        with self._session() as session:
            rows = (
                session.query(DrawRecord, PrizeNumber)
                .join(PrizeNumber, PrizeNumber.draw_id == DrawRecord.id)
                .filter(PrizeNumber.number_value.contains(number, autoescape=True))
                .order_by(DrawRecord.draw_date.desc(), PrizeNumber.category, PrizeNumber.round_number)
                .all()
            )
            return self._detached(session, [(draw, prize) for draw, prize in rows])

    def get_complete(self, draw_date: str) -> Optional[CompleteDraw]:
        with self._session() as session:
            draw = session.query(DrawRecord).filter(DrawRecord.draw_date == draw_date).one_or_none()
            if draw is None:
                return None
            prizes = (
                session.query(PrizeNumber)
                .filter(PrizeNumber.draw_id == draw.id)
                .order_by(PrizeNumber.category, PrizeNumber.round_number)
                .all()
            )
            session.expunge_all()
            return CompleteDraw(draw=draw, prizes=prizes)
