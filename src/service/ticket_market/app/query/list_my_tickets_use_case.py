from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import ValidationError
from src.platform.logging.loguru_io import Logger
from src.service.ticket_market.app.dto.page_result import PageResult
from src.service.ticket_market.app.interface.i_ticket_query_repo import ITicketQueryRepo
from src.service.ticket_market.domain.entity.ticket_entity import TicketEntity
from src.service.ticket_market.domain.entity.user_entity import UserEntity
from src.service.ticket_market.domain.enum.ticket_status import TicketStatus


MAX_PAGE_SIZE = 100


class ListMyTicketsUseCase:
    def __init__(self, ticket_query_repo: ITicketQueryRepo):
        self.ticket_query_repo = ticket_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        ticket_query_repo: ITicketQueryRepo = Depends(Provide[Container.ticket_query_repo]),
    ) -> Self:
        return cls(ticket_query_repo=ticket_query_repo)

    @Logger.io
    async def list(
        self,
        *,
        owner: UserEntity,
        status: Optional[TicketStatus] = None,
        page: int = 1,
        limit: int = 10,
    ) -> PageResult[TicketEntity]:
        if page < 1:
            raise ValidationError('page must be at least 1')
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError(f'limit must be between 1 and {MAX_PAGE_SIZE}')

        tickets, total = await self.ticket_query_repo.list_by_owner(
            owner_id=owner.id, status=status, offset=(page - 1) * limit, limit=limit
        )
        return PageResult(items=tickets, total=total, page=page, limit=limit)
