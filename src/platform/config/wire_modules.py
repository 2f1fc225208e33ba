"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.ticket_market.app.command import (
    book_ticket_use_case,
    cancel_resale_listing_use_case,
    check_in_ticket_use_case,
    create_payment_order_use_case,
    list_ticket_for_resale_use_case,
    refund_ticket_use_case,
    release_expired_holds_use_case,
    verify_payment_use_case,
)
from src.service.ticket_market.app.query import (
    get_payment_status_use_case,
    get_ticket_use_case,
    list_my_tickets_use_case,
    list_open_listings_use_case,
)
from src.service.ticket_market.driving_adapter.http_controller.auth import role_auth


WIRE_MODULES: list[ModuleType] = [
    book_ticket_use_case,
    create_payment_order_use_case,
    verify_payment_use_case,
    refund_ticket_use_case,
    list_ticket_for_resale_use_case,
    cancel_resale_listing_use_case,
    check_in_ticket_use_case,
    release_expired_holds_use_case,
    list_my_tickets_use_case,
    get_ticket_use_case,
    get_payment_status_use_case,
    list_open_listings_use_case,
    role_auth,
]
