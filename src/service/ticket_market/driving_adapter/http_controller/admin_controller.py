from fastapi import APIRouter, Depends

from src.platform.logging.loguru_io import Logger
from src.service.ticket_market.app.command.release_expired_holds_use_case import (
    ReleaseExpiredHoldsUseCase,
)
from src.service.ticket_market.domain.entity.user_entity import UserEntity
from src.service.ticket_market.driving_adapter.http_controller.auth.role_auth import (
    get_current_user,
)
from src.service.ticket_market.driving_adapter.http_controller.schema.admin_schema import (
    ReleaseExpiredResponse,
)


router = APIRouter()


@router.post('/release_expired')
@Logger.io
async def release_expired_holds(
    current_user: UserEntity = Depends(get_current_user),
    use_case: ReleaseExpiredHoldsUseCase = Depends(ReleaseExpiredHoldsUseCase.depends),
) -> ReleaseExpiredResponse:
    count = await use_case.release_expired_on_demand(actor=current_user)
    return ReleaseExpiredResponse(count=count)
