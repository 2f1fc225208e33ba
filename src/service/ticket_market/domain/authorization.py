"""
Authorization predicate

Every use case calls `authorize(actor, entity, action)` before touching state.
Ownership is checked against the entity as loaded; the mutation itself
re-checks ownership in its compare-and-set, so a stale read cannot be exploited.
"""

from enum import StrEnum
from typing import Callable, Optional, Union

from src.platform.exception.exceptions import AuthorizationError
from src.service.ticket_market.domain.entity.resale_listing_entity import ResaleListingEntity
from src.service.ticket_market.domain.entity.ticket_entity import TicketEntity
from src.service.ticket_market.domain.entity.user_entity import UserEntity, UserRole


class Action(StrEnum):
    BOOK = 'book'
    PAY_TICKET = 'pay_ticket'
    BUY_LISTING = 'buy_listing'
    LIST_TICKET = 'list_ticket'
    CANCEL_LISTING = 'cancel_listing'
    REFUND_TICKET = 'refund_ticket'
    VIEW_TICKET = 'view_ticket'
    VIEW_PAYMENT = 'view_payment'
    CHECK_IN = 'check_in'
    RELEASE_EXPIRED = 'release_expired'


Subject = Union[TicketEntity, ResaleListingEntity, None]


def _owns_ticket(actor: UserEntity, entity: Subject) -> bool:
    return isinstance(entity, TicketEntity) and entity.owner_id == actor.id


def _sells_listing(actor: UserEntity, entity: Subject) -> bool:
    return isinstance(entity, ResaleListingEntity) and entity.seller_id == actor.id


_RULES: dict[Action, Callable[[UserEntity, Subject], bool]] = {
    Action.BOOK: lambda actor, _: True,
    Action.PAY_TICKET: _owns_ticket,
    Action.BUY_LISTING: lambda actor, entity: (
        isinstance(entity, ResaleListingEntity) and entity.seller_id != actor.id
    ),
    Action.LIST_TICKET: _owns_ticket,
    Action.CANCEL_LISTING: _sells_listing,
    Action.REFUND_TICKET: _owns_ticket,
    Action.VIEW_TICKET: lambda actor, entity: actor.is_staff or _owns_ticket(actor, entity),
    Action.VIEW_PAYMENT: lambda actor, entity: actor.is_staff or _owns_ticket(actor, entity),
    Action.CHECK_IN: lambda actor, _: actor.is_staff,
    Action.RELEASE_EXPIRED: lambda actor, _: actor.role == UserRole.ADMIN,
}

_DENIAL_MESSAGES: dict[Action, str] = {
    Action.PAY_TICKET: 'Only the ticket holder can pay for this ticket',
    Action.BUY_LISTING: 'Sellers cannot buy their own listing',
    Action.LIST_TICKET: 'Only the ticket owner can list it for resale',
    Action.CANCEL_LISTING: 'Only the seller can cancel this listing',
    Action.REFUND_TICKET: 'Only the ticket owner can return it',
    Action.CHECK_IN: 'Only organizers can check tickets in',
    Action.RELEASE_EXPIRED: 'Only admins can trigger the expiry sweep',
}


def is_allowed(actor: UserEntity, entity: Subject, action: Action) -> bool:
    return _RULES[action](actor, entity)


def authorize(actor: UserEntity, entity: Optional[Subject], action: Action) -> None:
    if not is_allowed(actor, entity, action):
        raise AuthorizationError(_DENIAL_MESSAGES.get(action, 'Not allowed'))
