"""
Actor

The identity an operation runs on behalf of. Request handlers build it
from the authenticated user and pass it into every engine call; nothing
in the domain reads a "current user" from ambient state.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ActorRole(str, Enum):
    RENTER = 'renter'
    HOMEOWNER = 'homeowner'
    ADMIN = 'admin'
    GUEST = 'guest'  # unauthenticated checkout


@dataclass(frozen=True)
class Actor:
    role: ActorRole
    user_id: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, 'role', ActorRole(self.role))
        if self.role != ActorRole.GUEST and self.user_id is None:
            raise ValueError(f"{self.role.value} actor needs a user_id")

    @classmethod
    def guest(cls) -> 'Actor':
        return cls(ActorRole.GUEST)

    @property
    def is_admin(self) -> bool:
        return self.role == ActorRole.ADMIN

    @property
    def is_guest(self) -> bool:
        return self.role == ActorRole.GUEST

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None
