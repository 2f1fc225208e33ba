"""Model <-> entity conversion shared by command and query repositories."""

from src.service.ticket_market.domain.entity.audit_entry_entity import AuditEntryEntity
from src.service.ticket_market.domain.entity.event_entity import EventEntity, TicketClassEntity
from src.service.ticket_market.domain.entity.payment_order_entity import (
    PaymentOrderEntity,
    PaymentOrderStatus,
    PaymentOutcome,
    PaymentSubjectKind,
)
from src.service.ticket_market.domain.entity.resale_listing_entity import (
    ListingStatus,
    ResaleListingEntity,
)
from src.service.ticket_market.domain.entity.ticket_entity import TicketEntity
from src.service.ticket_market.domain.enum.audit_action import AuditAction
from src.service.ticket_market.domain.enum.class_type import ClassType
from src.service.ticket_market.domain.enum.ticket_status import PaymentState, TicketStatus
from src.service.ticket_market.driven_adapter.model.audit_entry_model import AuditEntryModel
from src.service.ticket_market.driven_adapter.model.event_model import EventModel, TicketClassModel
from src.service.ticket_market.driven_adapter.model.payment_order_model import PaymentOrderModel
from src.service.ticket_market.driven_adapter.model.resale_listing_model import ResaleListingModel
from src.service.ticket_market.driven_adapter.model.ticket_model import TicketModel


def event_to_entity(model: EventModel) -> EventEntity:
    return EventEntity(
        id=model.id,
        name=model.name,
        starts_at=model.starts_at,
        ends_at=model.ends_at,
        hold_window_minutes=model.hold_window_minutes,
    )


def ticket_class_to_entity(model: TicketClassModel) -> TicketClassEntity:
    return TicketClassEntity(
        id=model.id,
        event_id=model.event_id,
        class_type=ClassType(model.class_type),
        total_supply=model.total_supply,
        remaining=model.remaining,
        unit_price=model.unit_price,
        currency=model.currency,
    )


def ticket_to_entity(model: TicketModel) -> TicketEntity:
    return TicketEntity(
        id=model.id,
        ticket_class_id=model.ticket_class_id,
        event_id=model.event_id,
        owner_id=model.owner_id,
        status=TicketStatus(model.status),
        hold_expires_at=model.hold_expires_at,
        payment_state=PaymentState(model.payment_state),
        external_order_ref=model.external_order_ref,
        qr_token=model.qr_token,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def ticket_to_model(ticket: TicketEntity) -> TicketModel:
    return TicketModel(
        id=ticket.id,
        ticket_class_id=ticket.ticket_class_id,
        event_id=ticket.event_id,
        owner_id=ticket.owner_id,
        status=ticket.status.value,
        hold_expires_at=ticket.hold_expires_at,
        payment_state=ticket.payment_state.value,
        external_order_ref=ticket.external_order_ref,
        qr_token=ticket.qr_token,
        created_at=ticket.created_at,
        updated_at=ticket.updated_at,
    )


def payment_order_to_entity(model: PaymentOrderModel) -> PaymentOrderEntity:
    return PaymentOrderEntity(
        id=model.id,
        subject_kind=PaymentSubjectKind(model.subject_kind),
        ticket_id=model.ticket_id,
        listing_id=model.listing_id,
        payer_id=model.payer_id,
        amount=model.amount,
        currency=model.currency,
        external_order_id=model.external_order_id,
        external_payment_id=model.external_payment_id,
        status=PaymentOrderStatus(model.status),
        outcome=PaymentOutcome(model.outcome) if model.outcome else None,
        refund_id=model.refund_id,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def resale_listing_to_entity(model: ResaleListingModel) -> ResaleListingEntity:
    return ResaleListingEntity(
        id=model.id,
        ticket_id=model.ticket_id,
        seller_id=model.seller_id,
        ask_price=model.ask_price,
        currency=model.currency,
        status=ListingStatus(model.status),
        buyer_id=model.buyer_id,
        created_at=model.created_at,
        closed_at=model.closed_at,
    )


def audit_entry_to_entity(model: AuditEntryModel) -> AuditEntryEntity:
    return AuditEntryEntity(
        id=model.id,
        ticket_id=model.ticket_id,
        actor_id=model.actor_id,
        action=AuditAction(model.action),
        external_payment_id=model.external_payment_id,
        timestamp=model.timestamp,
    )
