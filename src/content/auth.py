"""Admin authentication and the session gate for store mutations.

The shared secret is demo-grade: it is compared in-process, with no rate
limiting and no identity provider behind it.  Configure ``password_sha256``
to at least keep the plaintext secret out of config files.
"""

from __future__ import annotations

import functools
import hashlib
import hmac
import logging
from collections.abc import Callable
from typing import Any, Protocol, TypeVar

from vitrine.content.models import MutationResult

logger = logging.getLogger(__name__)

DEFAULT_PASSWORD = "admin"


class Authenticator:
    """Checks a password against the configured shared secret."""

    def __init__(self, password: str = DEFAULT_PASSWORD, password_sha256: str = "") -> None:
        self._password = password
        self._password_sha256 = password_sha256.strip().lower()

    def verify(self, password: str) -> bool:
        if self._password_sha256:
            digest = hashlib.sha256(password.encode("utf-8")).hexdigest()
            return hmac.compare_digest(digest, self._password_sha256)
        if not self._password:
            return False
        return hmac.compare_digest(password.encode("utf-8"), self._password.encode("utf-8"))


class _Gated(Protocol):
    @property
    def is_authenticated(self) -> bool: ...


F = TypeVar("F", bound=Callable[..., MutationResult])


def requires_session(method: F) -> F:
    """Turn a store mutation into a silent DENIED no-op for anonymous callers."""

    @functools.wraps(method)
    def wrapper(self: _Gated, *args: Any, **kwargs: Any) -> MutationResult:
        if not self.is_authenticated:
            logger.debug("Denied %s: no authenticated session", method.__name__)
            return MutationResult.DENIED
        return method(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]
