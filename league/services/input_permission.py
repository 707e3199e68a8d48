"""
Input permission gate.

A match's ``input_allowed_team_id`` column holds one of three things: NULL
(nobody may enter a result), the sentinel ``"admin"`` (administrators only), or
a team id (only that team). Inside the application the value is an
``InputPermission``; the sentinel form only exists at the storage boundary.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from league.core.errors import ValidationError

ADMIN_SENTINEL = "admin"


class PermissionKind(str, Enum):
    NOBODY = "nobody"
    ADMIN_ONLY = "admin_only"
    TEAM = "team"


class DenialReason(str, Enum):
    NOT_OPEN = "NotOpen"
    ADMIN_ONLY = "AdminOnly"
    WRONG_TEAM = "WrongTeam"


DENIAL_MESSAGES = {
    DenialReason.NOT_OPEN: "Result input is not open for this match",
    DenialReason.ADMIN_ONLY: "Only administrators may enter the result of this match",
    DenialReason.WRONG_TEAM: "Your team is not allowed to enter the result of this match",
}


@dataclass(frozen=True)
class InputPermission:
    kind: PermissionKind
    team_id: Optional[str] = None

    @classmethod
    def nobody(cls) -> "InputPermission":
        return cls(PermissionKind.NOBODY)

    @classmethod
    def admin_only(cls) -> "InputPermission":
        return cls(PermissionKind.ADMIN_ONLY)

    @classmethod
    def team(cls, team_id: str) -> "InputPermission":
        return cls(PermissionKind.TEAM, team_id)

    @classmethod
    def from_storage(cls, value: Optional[str]) -> "InputPermission":
        if not value:
            return cls.nobody()
        if value == ADMIN_SENTINEL:
            return cls.admin_only()
        return cls.team(value)

    def to_storage(self) -> Optional[str]:
        if self.kind is PermissionKind.NOBODY:
            return None
        if self.kind is PermissionKind.ADMIN_ONLY:
            return ADMIN_SENTINEL
        return self.team_id


@dataclass(frozen=True)
class PermissionDecision:
    allowed: bool
    reason: Optional[DenialReason] = None

    @property
    def message(self) -> Optional[str]:
        return DENIAL_MESSAGES.get(self.reason) if self.reason else None


ALLOWED = PermissionDecision(True)


def resolve_permission(permission: InputPermission, acting_team_id: str) -> PermissionDecision:
    """Decide whether ``acting_team_id`` may submit a result under ``permission``.

    Teams can never act on an admin-only match; that path belongs to the
    administrator endpoints, which do not consult this gate at all.
    """
    if permission.kind is PermissionKind.NOBODY:
        return PermissionDecision(False, DenialReason.NOT_OPEN)
    if permission.kind is PermissionKind.ADMIN_ONLY:
        return PermissionDecision(False, DenialReason.ADMIN_ONLY)
    if permission.team_id != acting_team_id:
        return PermissionDecision(False, DenialReason.WRONG_TEAM)
    return ALLOWED


def validate_admin_permission(value: Optional[str], team_id: Optional[str], opponent_team_id: Optional[str]) -> InputPermission:
    """Parse a permission an administrator is assigning to a match.

    Only nobody, admin-only, or one of the two participating teams are valid.
    """
    permission = InputPermission.from_storage(value)
    if permission.kind is PermissionKind.TEAM and permission.team_id not in {team_id, opponent_team_id}:
        raise ValidationError("input_allowed_team_id must be null, 'admin', or one of the match's teams")
    return permission
