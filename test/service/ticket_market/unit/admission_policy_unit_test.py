from datetime import datetime, timedelta, timezone

import pytest
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import ConflictError, ConflictReason
from src.service.ticket_market.domain.admission_policy import AdmissionPolicy
from src.service.ticket_market.domain.entity.event_entity import EventEntity


STARTS_AT = datetime(2026, 12, 31, 20, 0, tzinfo=timezone.utc)


@pytest.fixture
def event() -> EventEntity:
    return EventEntity(
        id=uuid7(),
        name='New Year Gala',
        starts_at=STARTS_AT,
        ends_at=STARTS_AT + timedelta(hours=4),
        hold_window_minutes=240,
    )


@pytest.mark.unit
class TestAdmissionPolicy:
    def test_disabled_policy_admits_any_time(self, event: EventEntity) -> None:
        policy = AdmissionPolicy()

        assert policy.admits(event=event, now=STARTS_AT - timedelta(days=30))
        assert policy.admits(event=event, now=STARTS_AT + timedelta(days=30))

    def test_window_bounds_are_inclusive(self, event: EventEntity) -> None:
        policy = AdmissionPolicy(
            enabled=True, opens_before=timedelta(hours=2), closes_after=timedelta(minutes=30)
        )

        assert policy.admits(event=event, now=STARTS_AT - timedelta(hours=2))
        assert policy.admits(event=event, now=event.ends_at + timedelta(minutes=30))
        assert not policy.admits(event=event, now=STARTS_AT - timedelta(hours=2, seconds=1))
        assert not policy.admits(event=event, now=event.ends_at + timedelta(minutes=31))

    def test_validate_raises_not_redeemable_outside_window(self, event: EventEntity) -> None:
        policy = AdmissionPolicy(enabled=True)

        with pytest.raises(ConflictError) as exc_info:
            policy.validate(event=event, now=STARTS_AT - timedelta(days=1))

        assert exc_info.value.reason == ConflictReason.NOT_REDEEMABLE
