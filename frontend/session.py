"""
Client session state.

One ``SessionState`` per frontend process holds the current user summary and
the bearer token, mirrors them into ``SessionStorage``, and notifies
subscribers after every change.  Only ``login``, ``register`` and ``logout``
mutate it.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from config.settings import Settings
from frontend.auth_client import AuthClient
from frontend.storage import SessionStorage

logger = logging.getLogger(__name__)

Listener = Callable[["SessionState"], None]


class SessionState:
    def __init__(self, client: AuthClient, storage: SessionStorage):
        self._client = client
        self._storage = storage
        self._token, self._user = storage.load()
        self._listeners: List[Listener] = []

    @classmethod
    def from_settings(cls, settings: Settings) -> "SessionState":
        client = AuthClient(settings.api_url, timeout=settings.client_timeout_seconds)
        return cls(client, SessionStorage(settings.session_file))

    # ── Read side ────────────────────────────────────────────────────────

    @property
    def client(self) -> AuthClient:
        return self._client

    @property
    def storage(self) -> SessionStorage:
        return self._storage

    @property
    def user(self) -> Optional[Dict[str, Any]]:
        return dict(self._user) if self._user is not None else None

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None and self._user is not None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # ── Mutators ─────────────────────────────────────────────────────────

    def _accept(self, body: Dict[str, Any]) -> Dict[str, Any]:
        token = body["token"]
        user = body["data"]["user"]
        self._storage.save(token, user)
        self._token, self._user = token, user
        self._notify()
        return self.user

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """
        Log in and cache the returned credentials.

        On failure the state is left untouched and ``AuthRequestError`` is
        re-raised for the UI to display.
        """
        body = await self._client.login(email, password)
        logger.info("Logged in as %s", body["data"]["user"].get("_id"))
        return self._accept(body)

    async def register(
        self, first_name: str, last_name: str, email: str, password: str
    ) -> Dict[str, Any]:
        body = await self._client.register(first_name, last_name, email, password)
        logger.info("Registered as %s", body["data"]["user"].get("_id"))
        return self._accept(body)

    def logout(self) -> None:
        """Forget the cached credentials. Purely local."""
        self._storage.clear()
        self._token, self._user = None, None
        self._notify()
