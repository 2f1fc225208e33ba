from datetime import datetime
from typing import List
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.platform.database.orm_db_setting import Base
from src.platform.types.utc_datetime import UTCDateTime


class EventModel(Base):
    __tablename__ = 'event'

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)  # UUID7
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    starts_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    ends_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    hold_window_minutes: Mapped[int] = mapped_column(Integer, nullable=False)

    ticket_classes: Mapped[List['TicketClassModel']] = relationship(
        'TicketClassModel', back_populates='event', lazy='selectin'
    )


class TicketClassModel(Base):
    __tablename__ = 'ticket_class'
    __table_args__ = (
        UniqueConstraint('event_id', 'class_type', name='uq_ticket_class_event_type'),
        CheckConstraint(
            'remaining >= 0 AND remaining <= total_supply', name='ck_ticket_class_remaining'
        ),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    event_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey('event.id'), nullable=False, index=True)
    class_type: Mapped[str] = mapped_column(String(20), nullable=False)
    total_supply: Mapped[int] = mapped_column(Integer, nullable=False)
    remaining: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default='INR')

    event: Mapped['EventModel'] = relationship('EventModel', back_populates='ticket_classes')
