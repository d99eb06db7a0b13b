"""Route access policy: who may open which page, and where everyone else goes.

The policy is plain data (an ordered list of prefix rules plus a role -> home
path table) evaluated by pure functions. Nothing here performs I/O; identity
and profile lookups happen in the middleware, which feeds the results into
:func:`resolve`.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple
from urllib.parse import urlencode, urlsplit


class Role(str, Enum):
    """Role codes as stored in ``profiles.ruolo``."""
    SVILUPPATORE = "sviluppatore"
    AMMINISTRATORE = "amministratore"
    DIRETTORE = "direttore"
    CASEMANAGER = "casemanager"
    EDUCATORE = "educatore"
    UTENTE = "utente"
    VISITATORE = "visitatore"


# Display ordering for the role catalogue, never used for enforcement
ACCESS_LEVELS: Dict[str, int] = {
    Role.SVILUPPATORE.value: 100,
    Role.AMMINISTRATORE.value: 90,
    Role.DIRETTORE.value: 80,
    Role.CASEMANAGER.value: 70,
    Role.EDUCATORE.value: 50,
    Role.UTENTE.value: 10,
    Role.VISITATORE.value: 0,
}

ANY_ROLE = "*"

ADMIN_ROLES = frozenset({
    Role.AMMINISTRATORE.value,
    Role.DIRETTORE.value,
    Role.CASEMANAGER.value,
})
STAFF_ROLES = ADMIN_ROLES | {Role.EDUCATORE.value}
# Operators listed on the admin staff page
MANAGEMENT_ROLES = ADMIN_ROLES | {Role.SVILUPPATORE.value}


class RouteClass(str, Enum):
    PUBLIC = "public"
    PROTECTED = "protected"


class AccessState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED_NO_PROFILE = "authenticated_no_profile"
    AUTHENTICATED_WITH_ROLE = "authenticated_with_role"


class DecisionAction(str, Enum):
    PROCEED = "proceed"
    REDIRECT = "redirect"


@dataclass(frozen=True)
class AccessRule:
    prefix: str
    roles: FrozenSet[str]

    def matches(self, path: str) -> bool:
        return path.startswith(self.prefix)

    def permits(self, role: str) -> bool:
        return ANY_ROLE in self.roles or role in self.roles


@dataclass(frozen=True)
class AccessDecision:
    action: DecisionAction
    location: Optional[str] = None
    sign_out: bool = False
    reason: str = ""

    @property
    def is_redirect(self) -> bool:
        return self.action == DecisionAction.REDIRECT


@dataclass(frozen=True)
class AccessPolicy:
    """Static route table. Built once at startup and never mutated."""
    rules: Tuple[AccessRule, ...]
    home_paths: Dict[str, str]
    public_paths: FrozenSet[str] = frozenset({"/", "/login", "/register"})
    ignored_prefixes: Tuple[str, ...] = ("/static", "/api/auth/callback", "/icons", "/images")
    protected_prefixes: Tuple[str, ...] = ("/admin", "/dashboard", "/training", "/strumenti")
    auth_form_paths: FrozenSet[str] = frozenset({"/login", "/register"})
    login_path: str = "/login"
    superuser: str = Role.SVILUPPATORE.value
    fail_closed: bool = False
    _sorted_rules: Tuple[AccessRule, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        # Longest prefix first so "/admin/ruoli" can override "/admin"
        ordered = tuple(sorted(self.rules, key=lambda r: len(r.prefix), reverse=True))
        object.__setattr__(self, "_sorted_rules", ordered)

    def is_ignored(self, path: str) -> bool:
        path = _path_only(path)
        return "." in path or any(path.startswith(p) for p in self.ignored_prefixes)

    def classify(self, path: str) -> RouteClass:
        path = _path_only(path)
        if path in self.public_paths or self.is_ignored(path):
            return RouteClass.PUBLIC
        if any(path.startswith(p) for p in self.protected_prefixes):
            return RouteClass.PROTECTED
        return RouteClass.PUBLIC

    def match_rule(self, path: str) -> Optional[AccessRule]:
        path = _path_only(path)
        for rule in self._sorted_rules:
            if rule.matches(path):
                return rule
        return None

    def is_allowed(self, role: Optional[str], path: str) -> bool:
        if self.classify(path) == RouteClass.PUBLIC:
            return True
        if not role:
            return False
        if role == self.superuser:
            return True
        rule = self.match_rule(path)
        if rule is None:
            return not self.fail_closed
        return rule.permits(role)

    def redirect_target_for(self, role: Optional[str]) -> str:
        if not role:
            return self.login_path
        return self.home_paths.get(role, self.login_path)

    def login_redirect(self, path: str) -> str:
        return f"{self.login_path}?{urlencode({'redirect': path})}"

    def resolve(self, state: AccessState, role: Optional[str], path: str) -> AccessDecision:
        """Per-request decision for a caller in ``state`` asking for ``path``."""
        if self.is_ignored(path):
            return AccessDecision(DecisionAction.PROCEED, reason="ignored path")

        route_class = self.classify(path)
        bare_path = _path_only(path)

        if route_class == RouteClass.PUBLIC:
            if (state == AccessState.AUTHENTICATED_WITH_ROLE
                    and bare_path in self.auth_form_paths):
                home = self.redirect_target_for(role)
                if _path_only(home) != bare_path:
                    return AccessDecision(
                        DecisionAction.REDIRECT, home,
                        reason="already authenticated",
                    )
            return AccessDecision(DecisionAction.PROCEED, reason="public path")

        if state == AccessState.UNAUTHENTICATED:
            return AccessDecision(
                DecisionAction.REDIRECT, self.login_redirect(path),
                reason="authentication required",
            )

        if state == AccessState.AUTHENTICATED_NO_PROFILE:
            return AccessDecision(
                DecisionAction.REDIRECT, self.login_path, sign_out=True,
                reason="profile not found",
            )

        if not self.is_allowed(role, path):
            return AccessDecision(
                DecisionAction.REDIRECT, self.redirect_target_for(role),
                reason=f"role '{role}' not allowed",
            )
        return AccessDecision(DecisionAction.PROCEED, reason="allowed")


def _path_only(path: str) -> str:
    return urlsplit(path).path or "/"


def default_policy(fail_closed: bool = False) -> AccessPolicy:
    """The deployed route table."""
    admin_home = "/admin"
    return AccessPolicy(
        rules=(
            AccessRule("/admin", ADMIN_ROLES),
            AccessRule("/dashboard", STAFF_ROLES),
            AccessRule("/training", frozenset({ANY_ROLE})),
            AccessRule("/strumenti", frozenset({ANY_ROLE})),
        ),
        home_paths={
            Role.SVILUPPATORE.value: admin_home,
            Role.AMMINISTRATORE.value: admin_home,
            Role.DIRETTORE.value: admin_home,
            Role.CASEMANAGER.value: admin_home,
            Role.EDUCATORE.value: "/dashboard",
            Role.UTENTE.value: "/training",
            Role.VISITATORE.value: "/training?demo=1",
        },
        fail_closed=fail_closed,
    )
