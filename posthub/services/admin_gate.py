"""Shared-secret check for mutating requests."""
from __future__ import annotations

from posthub.errors import AuthorizationError
from posthub.utils import get_logger

logger = get_logger(__name__)


class AdminGate:
    """Compares the caller's secret against the configured admin password.

    No sessions or tokens: callers pass the secret on every request. An
    unconfigured password denies everything.
    """

    def __init__(self, secret: str | None):
        self._secret = secret or None

    @property
    def configured(self) -> bool:
        return self._secret is not None

    def authorize(self, supplied: object) -> bool:
        if self._secret is None or not isinstance(supplied, str):
            return False
        return supplied == self._secret

    def require(self, supplied: object) -> None:
        if not self.authorize(supplied):
            logger.warning(
                "Admin access denied",
                password_supplied=supplied is not None,
                gate_configured=self.configured,
            )
            raise AuthorizationError()


__all__ = ["AdminGate"]
