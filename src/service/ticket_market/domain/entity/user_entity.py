from enum import StrEnum

import attrs


class UserRole(StrEnum):
    USER = 'user'
    ORGANIZER = 'organizer'
    ADMIN = 'admin'


@attrs.define(frozen=True)
class UserEntity:
    """Caller identity rebuilt from the bearer token; accounts live elsewhere."""

    id: int
    role: UserRole = UserRole.USER

    @property
    def is_staff(self) -> bool:
        return self.role in (UserRole.ORGANIZER, UserRole.ADMIN)
