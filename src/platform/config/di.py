"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from datetime import timedelta

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings, settings
from src.platform.database.orm_db_setting import Database
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from src.service.ticket_market.domain.admission_policy import AdmissionPolicy
from src.service.ticket_market.driven_adapter.payment.mock_payment_gateway_impl import (
    MockPaymentGatewayImpl,
)
from src.service.ticket_market.driven_adapter.payment.razorpay_gateway_impl import (
    RazorpayGatewayImpl,
)
from src.service.ticket_market.driven_adapter.publisher.ticket_activated_publisher_impl import (
    TicketActivatedPublisherImpl,
)
from src.service.ticket_market.driven_adapter.repo.event_catalog_command_repo_impl import (
    EventCatalogCommandRepoImpl,
)
from src.service.ticket_market.driven_adapter.repo.event_catalog_query_repo_impl import (
    EventCatalogQueryRepoImpl,
)
from src.service.ticket_market.driven_adapter.repo.payment_order_query_repo_impl import (
    PaymentOrderQueryRepoImpl,
)
from src.service.ticket_market.driven_adapter.repo.resale_listing_query_repo_impl import (
    ResaleListingQueryRepoImpl,
)
from src.service.ticket_market.driven_adapter.repo.ticket_query_repo_impl import (
    TicketQueryRepoImpl,
)
from src.service.ticket_market.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


def _payment_gateway_kind() -> str:
    return settings.PAYMENT_GATEWAY


def _admission_policy_from_settings() -> AdmissionPolicy:
    return AdmissionPolicy(
        enabled=settings.ADMISSION_WINDOW_ENABLED,
        opens_before=timedelta(minutes=settings.ADMISSION_OPENS_BEFORE_MINUTES),
        closes_after=timedelta(minutes=settings.ADMISSION_CLOSES_AFTER_MINUTES),
    )


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Database (uses AsyncEngineManager with settings from core_setting)
    database = providers.Singleton(Database)

    # Background task group (set by main.py lifespan)
    # Used for fire-and-forget tasks like the ticket activated hook
    background_task_group = providers.Object(None)

    # Unit of Work (one per atomic unit; inject `.provider` to get a factory)
    unit_of_work = providers.Factory(SqlAlchemyUnitOfWork)

    # Query repositories (stateless - use session_factory per call)
    event_catalog_query_repo = providers.Singleton(
        EventCatalogQueryRepoImpl, session_factory=database.provided.session
    )
    event_catalog_command_repo = providers.Singleton(
        EventCatalogCommandRepoImpl, session_factory=database.provided.session
    )
    ticket_query_repo = providers.Singleton(
        TicketQueryRepoImpl, session_factory=database.provided.session
    )
    payment_order_query_repo = providers.Singleton(
        PaymentOrderQueryRepoImpl, session_factory=database.provided.session
    )
    resale_listing_query_repo = providers.Singleton(
        ResaleListingQueryRepoImpl, session_factory=database.provided.session
    )

    # External payment gateway (PAYMENT_GATEWAY=mock|razorpay)
    payment_gateway = providers.Selector(
        providers.Callable(_payment_gateway_kind),
        mock=providers.Singleton(MockPaymentGatewayImpl),
        razorpay=providers.Singleton(RazorpayGatewayImpl),
    )

    # Downstream hook for activated tickets
    ticket_activated_publisher = providers.Singleton(
        TicketActivatedPublisherImpl,
        task_group_provider=background_task_group.provider,
    )

    # Gate admission policy
    admission_policy = providers.Singleton(_admission_policy_from_settings)

    # Auth service
    jwt_auth = providers.Singleton(JwtAuth)


container = Container()


def setup() -> None:
    container.config_service()


def cleanup() -> None:
    container.reset_singletons()
