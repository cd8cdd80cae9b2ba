# ecommerce_admin/auth/gate.py
"""
Capability checks for staff users.

A requirement names one or more roles and/or permissions; any single match
grants access. Evaluation order for every requirement kind:

1. no principal            -> REQUIRES_LOGIN (no grants lookup)
2. ``principal.is_admin``  -> AUTHORIZED     (no grants lookup)
3. grants lookup           -> AUTHORIZED on any match, else DENIED

Nothing here touches Flask or the database: grants are obtained through the
``load_grants`` callable so the checks stay pure.
"""
import enum
import re
from functools import wraps
from typing import Callable, Iterable, NamedTuple, Union


class AuthorizationResult(enum.Enum):
    AUTHORIZED = "authorized"
    DENIED = "denied"
    REQUIRES_LOGIN = "requires_login"


class RequirementKind(enum.Enum):
    PERMISSION = "permission"
    ROLE = "role"
    ROLE_OR_PERMISSION = "role_or_permission"


class Grants(NamedTuple):
    roles: frozenset
    permissions: frozenset

    @classmethod
    def of(cls, roles=(), permissions=()):
        return cls(frozenset(roles), frozenset(permissions))


_SEPARATORS = re.compile(r'[|,]')


class Requirement(NamedTuple):
    kind: RequirementKind
    variants: tuple

    @classmethod
    def parse(cls, value: Union[str, Iterable[str], "Requirement"],
              kind: Union[RequirementKind, str] = RequirementKind.PERMISSION) -> "Requirement":
        """
        Normalise ``"a,b"``, ``"a|b"``, ``["a", "b"]`` (or a mix) into an
        ordered tuple of distinct names.
        """
        if isinstance(value, Requirement):
            return value
        kind = RequirementKind(kind)
        if value is None:
            raw_parts = []
        elif isinstance(value, str):
            raw_parts = _SEPARATORS.split(value)
        else:
            raw_parts = [part for item in value for part in _SEPARATORS.split(str(item))]
        variants = tuple(dict.fromkeys(part.strip() for part in raw_parts if part and part.strip()))
        if not variants:
            raise ValueError("A capability requirement needs at least one role or permission name.")
        return cls(kind, variants)

    def is_satisfied_by(self, grants: Grants) -> bool:
        if self.kind is RequirementKind.PERMISSION:
            held = grants.permissions
        elif self.kind is RequirementKind.ROLE:
            held = grants.roles
        else:
            held = grants.roles | grants.permissions
        return any(variant in held for variant in self.variants)

    def __str__(self):
        return '|'.join(self.variants)


GrantsLoader = Callable[[object], Grants]


def principal_grants(principal) -> Grants:
    """Grants straight from the principal: role names plus direct and inherited permissions."""
    return Grants.of(principal.role_names, principal.all_permission_names())


def check_capability(principal, requirement: Requirement, load_grants: GrantsLoader) -> AuthorizationResult:
    grants = load_grants(principal)
    if requirement.is_satisfied_by(grants):
        return AuthorizationResult.AUTHORIZED
    return AuthorizationResult.DENIED


def with_admin_bypass(check):
    """Wrap a capability check so admin principals pass before any grants lookup."""
    @wraps(check)
    def wrapper(principal, requirement, load_grants):
        if getattr(principal, 'is_admin', False):
            return AuthorizationResult.AUTHORIZED
        return check(principal, requirement, load_grants)
    return wrapper


capability_check = with_admin_bypass(check_capability)


def authorize(principal, requirement, load_grants: GrantsLoader = None,
              kind=RequirementKind.PERMISSION) -> AuthorizationResult:
    requirement = Requirement.parse(requirement, kind)
    if principal is None:
        return AuthorizationResult.REQUIRES_LOGIN
    return capability_check(principal, requirement, load_grants or principal_grants)
