"""Path-prefix access policy applied before routing."""

import posixpath
import re
from dataclasses import dataclass
from enum import StrEnum

_REPEATED_SLASHES = re.compile(r"/{2,}")


class GateAction(StrEnum):
    """What the gatekeeper does with a request."""

    PASS = "pass"
    REDIRECT = "redirect"
    UNAUTHORIZED = "unauthorized"


@dataclass(frozen=True)
class GateDecision:
    """Outcome of evaluating a request path."""

    action: GateAction
    location: str | None = None


@dataclass(frozen=True)
class GatePolicy:
    """Redirect or block whole path prefixes based on authentication."""

    dashboard_prefix: str = "/dashboard"
    api_prefix: str = "/api"
    auth_prefix: str = "/auth"
    login_path: str = "/auth/login"
    dashboard_path: str = "/dashboard"

    def guards(self, path: str) -> bool:
        """Return True when the path falls under a gated prefix."""
        normalized = normalize_path(path)
        return any(
            has_prefix(normalized, prefix)
            for prefix in (self.dashboard_prefix, self.api_prefix, self.auth_prefix)
        )

    def is_api(self, path: str) -> bool:
        """Return True for JSON API paths."""
        return has_prefix(normalize_path(path), self.api_prefix)

    def evaluate(self, path: str, authenticated: bool) -> GateDecision:
        """Decide what to do with a request for ``path``."""
        normalized = normalize_path(path)
        if not authenticated and has_prefix(normalized, self.dashboard_prefix):
            return GateDecision(GateAction.REDIRECT, self.login_path)
        if not authenticated and has_prefix(normalized, self.api_prefix):
            return GateDecision(GateAction.UNAUTHORIZED)
        if authenticated and has_prefix(normalized, self.auth_prefix):
            return GateDecision(GateAction.REDIRECT, self.dashboard_path)
        return GateDecision(GateAction.PASS)


def normalize_path(path: str) -> str:
    """Collapse repeated slashes and resolve dot segments."""
    collapsed = _REPEATED_SLASHES.sub("/", "/" + path.lstrip("/"))
    return posixpath.normpath(collapsed)


def has_prefix(path: str, prefix: str) -> bool:
    """Match whole path segments: ``/api`` matches ``/api/x`` but not ``/apix``."""
    return path == prefix or path.startswith(prefix.rstrip("/") + "/")
