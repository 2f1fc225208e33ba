from typing import Optional, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import ValidationError
from src.platform.logging.loguru_io import Logger
from src.service.ticket_market.app.dto.page_result import PageResult
from src.service.ticket_market.app.interface.i_resale_listing_query_repo import (
    IResaleListingQueryRepo,
)
from src.service.ticket_market.domain.entity.resale_listing_entity import ResaleListingEntity


class ListOpenListingsUseCase:
    def __init__(self, resale_listing_query_repo: IResaleListingQueryRepo):
        self.resale_listing_query_repo = resale_listing_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        resale_listing_query_repo: IResaleListingQueryRepo = Depends(
            Provide[Container.resale_listing_query_repo]
        ),
    ) -> Self:
        return cls(resale_listing_query_repo=resale_listing_query_repo)

    @Logger.io
    async def list(
        self, *, event_id: Optional[UUID] = None, page: int = 1, limit: int = 20
    ) -> PageResult[ResaleListingEntity]:
        if page < 1 or not 1 <= limit <= 100:
            raise ValidationError('page must be >= 1 and limit between 1 and 100')

        listings, total = await self.resale_listing_query_repo.list_open(
            event_id=event_id, offset=(page - 1) * limit, limit=limit
        )
        return PageResult(items=listings, total=total, page=page, limit=limit)
