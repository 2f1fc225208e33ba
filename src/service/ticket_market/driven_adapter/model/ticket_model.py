from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base
from src.platform.types.utc_datetime import UTCDateTime, utc_now


class TicketModel(Base):
    __tablename__ = 'ticket'
    __table_args__ = (
        Index('ix_ticket_owner_class_status', 'owner_id', 'ticket_class_id', 'status'),
        Index('ix_ticket_status_hold_expires_at', 'status', 'hold_expires_at'),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)  # UUID7
    ticket_class_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey('ticket_class.id'), nullable=False, index=True
    )
    event_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey('event.id'), nullable=False)
    owner_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default='held')
    hold_expires_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    payment_state: Mapped[str] = mapped_column(String(20), nullable=False, default='pending')
    external_order_ref: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    qr_token: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, unique=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utc_now, onupdate=utc_now
    )
