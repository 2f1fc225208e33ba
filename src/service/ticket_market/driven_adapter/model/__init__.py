"""
Database Models

Import all models here to ensure they are registered with SQLAlchemy
"""

from src.service.ticket_market.driven_adapter.model.audit_entry_model import AuditEntryModel
from src.service.ticket_market.driven_adapter.model.event_model import EventModel, TicketClassModel
from src.service.ticket_market.driven_adapter.model.payment_order_model import PaymentOrderModel
from src.service.ticket_market.driven_adapter.model.resale_listing_model import ResaleListingModel
from src.service.ticket_market.driven_adapter.model.ticket_model import TicketModel

__all__ = [
    'AuditEntryModel',
    'EventModel',
    'PaymentOrderModel',
    'ResaleListingModel',
    'TicketClassModel',
    'TicketModel',
]
