"""Ticket Market Domain Enums"""

from src.service.ticket_market.domain.enum.audit_action import AuditAction
from src.service.ticket_market.domain.enum.class_type import ClassType
from src.service.ticket_market.domain.enum.ticket_status import PaymentState, TicketStatus

__all__ = ['AuditAction', 'ClassType', 'PaymentState', 'TicketStatus']
