# src/offline_tasks/auth/identity.py

from __future__ import annotations

import logging

from ..core.ports import Identity

logger = logging.getLogger(__name__)


class StaticIdentityProvider:
    """
    Identity supplied from outside (settings, a login screen, a test).

    Sign-in UX lives elsewhere; this only holds whatever principal the host
    application decided is current.
    """

    def __init__(self, identity: Identity | None = None) -> None:
        self._identity = identity

    @classmethod
    def from_settings(cls, settings) -> StaticIdentityProvider:
        user_id = getattr(settings, "user_id", None)
        token = getattr(settings, "auth_token", None)
        if user_id and token:
            return cls(Identity(user_id=user_id, token=token))
        logger.info("No identity configured; remote pushes will fail until one is set.")
        return cls(None)

    def current_identity(self) -> Identity | None:
        return self._identity

    def set_identity(self, identity: Identity | None) -> None:
        self._identity = identity
        logger.info("Identity %s", f"set user={identity.user_id}" if identity else "cleared")

    def clear(self) -> None:
        self.set_identity(None)
