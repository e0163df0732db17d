"""Role-based authorization rules, expressed as a lookup over PrincipalRole.

One table replaces per-role copies of the same checks: what each role may do
and how roles rank against each other. Staff may only act on principals of
strictly lower rank (a moderator cannot suspend an admin or another moderator).
"""

from enum import Enum

from app.domain.enums import PrincipalRole


class Capability(str, Enum):
    """Administrative capabilities over other principals."""

    PRINCIPAL_READ = "principal:read"
    PRINCIPAL_SUSPEND = "principal:suspend"
    PRINCIPAL_BAN = "principal:ban"
    PRINCIPAL_REINSTATE = "principal:reinstate"
    PRINCIPAL_UNLOCK = "principal:unlock"
    PRINCIPAL_DELETE = "principal:delete"
    SESSION_READ = "session:read"


ROLE_RANK: dict[PrincipalRole, int] = {
    PrincipalRole.GUEST: 0,
    PrincipalRole.MEMBER: 1,
    PrincipalRole.MODERATOR: 2,
    PrincipalRole.ADMIN: 3,
}

ROLE_CAPABILITIES: dict[PrincipalRole, frozenset[Capability]] = {
    PrincipalRole.GUEST: frozenset(),
    PrincipalRole.MEMBER: frozenset(),
    PrincipalRole.MODERATOR: frozenset(
        {
            Capability.PRINCIPAL_READ,
            Capability.PRINCIPAL_SUSPEND,
            Capability.PRINCIPAL_REINSTATE,
            Capability.SESSION_READ,
        }
    ),
    PrincipalRole.ADMIN: frozenset(Capability),
}


def has_capability(role: PrincipalRole, capability: Capability) -> bool:
    return capability in ROLE_CAPABILITIES.get(role, frozenset())


def outranks(actor: PrincipalRole, target: PrincipalRole) -> bool:
    """Return True when actor's rank is strictly higher than target's."""
    return ROLE_RANK[actor] > ROLE_RANK[target]


def is_staff(role: PrincipalRole) -> bool:
    return bool(ROLE_CAPABILITIES.get(role))
