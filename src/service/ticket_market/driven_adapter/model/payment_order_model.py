from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base
from src.platform.types.utc_datetime import UTCDateTime, utc_now


class PaymentOrderModel(Base):
    __tablename__ = 'payment_order'
    __table_args__ = (Index('ix_payment_order_ticket_status', 'ticket_id', 'status'),)

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    subject_kind: Mapped[str] = mapped_column(String(10), nullable=False)
    ticket_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey('ticket.id'), nullable=False)
    listing_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid, ForeignKey('resale_listing.id'), nullable=True
    )
    payer_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    external_order_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    external_payment_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default='pending')
    outcome: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    refund_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utc_now, onupdate=utc_now
    )
