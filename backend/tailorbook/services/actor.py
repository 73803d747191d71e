"""The authenticated caller every service operation is invoked on behalf of."""
from dataclasses import dataclass
from uuid import UUID

from tailorbook.models.users import UserRole


@dataclass(frozen=True)
class Actor:
    id: UUID
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @classmethod
    def customer(cls, user_id: UUID) -> "Actor":
        return cls(id=user_id, role=UserRole.CUSTOMER)

    @classmethod
    def admin(cls, user_id: UUID) -> "Actor":
        return cls(id=user_id, role=UserRole.ADMIN)
