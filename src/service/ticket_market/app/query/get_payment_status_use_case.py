from typing import Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.ticket_market.app.interface.i_payment_order_query_repo import (
    IPaymentOrderQueryRepo,
)
from src.service.ticket_market.app.interface.i_ticket_query_repo import ITicketQueryRepo
from src.service.ticket_market.domain.authorization import Action, authorize
from src.service.ticket_market.domain.entity.payment_order_entity import PaymentOrderEntity
from src.service.ticket_market.domain.entity.user_entity import UserEntity


class GetPaymentStatusUseCase:
    def __init__(
        self, ticket_query_repo: ITicketQueryRepo, payment_order_query_repo: IPaymentOrderQueryRepo
    ):
        self.ticket_query_repo = ticket_query_repo
        self.payment_order_query_repo = payment_order_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        ticket_query_repo: ITicketQueryRepo = Depends(Provide[Container.ticket_query_repo]),
        payment_order_query_repo: IPaymentOrderQueryRepo = Depends(
            Provide[Container.payment_order_query_repo]
        ),
    ) -> Self:
        return cls(
            ticket_query_repo=ticket_query_repo, payment_order_query_repo=payment_order_query_repo
        )

    @Logger.io
    async def get(self, *, actor: UserEntity, ticket_id: UUID) -> PaymentOrderEntity:
        """Latest payment order opened against the ticket."""
        ticket = await self.ticket_query_repo.get_by_id(ticket_id=ticket_id)
        if not ticket:
            raise NotFoundError('Ticket not found')
        authorize(actor, ticket, Action.VIEW_PAYMENT)

        order = await self.payment_order_query_repo.get_latest_for_ticket(ticket_id=ticket_id)
        if not order:
            raise NotFoundError('No payment order for this ticket')
        return order
