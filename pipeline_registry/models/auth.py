"""Caller identity passed explicitly into every registry operation."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CallerIdentity:
    """The authenticated user on whose behalf an operation runs.

    Args:
        user_name: Name of the calling user.
        is_root: Whether the caller is exempt from ownership checks.
    """

    user_name: str
    is_root: bool = False

    @classmethod
    def from_user_name(cls, user_name: str, root_users: list[str]) -> "CallerIdentity":
        """Build an identity, marking it root when listed in ``root_users``."""
        return cls(user_name=user_name, is_root=user_name in root_users)
