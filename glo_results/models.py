from __future__ import annotations

import datetime as dt

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)


class DrawRecord(Base):
    __tablename__ = "draws"

    id = Column(Integer, primary_key=True, autoincrement=True)
    draw_date = Column(String(10), nullable=False, unique=True)
    period = Column(Text, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "draw_date": self.draw_date,
            "period": self.period,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class PrizeNumber(Base):
    __tablename__ = "prize_numbers"
    __table_args__ = (
        UniqueConstraint(
            "draw_id", "category", "number_value", "round_number", name="uq_prize_number"
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    draw_id = Column(Integer, ForeignKey("draws.id"), nullable=False, index=True)
    category = Column(String(16), nullable=False)
    prize_amount = Column(String(32), nullable=False)
    number_value = Column(String(16), nullable=False)
    round_number = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "draw_id": self.draw_id,
            "category": self.category,
            "prize_amount": self.prize_amount,
            "number_value": self.number_value,
            "round_number": self.round_number,
        }
