"""Domain entity representing the authenticated caller."""

from dataclasses import dataclass
from typing import Final

ADMIN_ROLES: Final[frozenset[str]] = frozenset(
    {"superadmin", "admin", "centeradmin", "staff"}
)


@dataclass(frozen=True)
class Principal:
    """Identity attached to every ingestion or query call."""

    user_id: int | None
    role: str = "user"

    def is_admin(self) -> bool:
        """Return ``True`` when the principal may use administrative endpoints."""

        return self.role.lower() in ADMIN_ROLES


__all__ = ["ADMIN_ROLES", "Principal"]
