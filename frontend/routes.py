"""
Client-side routing with an authentication guard.

Protected paths render only while the session is authenticated; otherwise
navigation is redirected to the login view.  The guard is evaluated on every
``navigate`` call and again whenever the session changes, so logging out on
a protected view sends the user back to ``/login`` immediately.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from frontend.session import SessionState

logger = logging.getLogger(__name__)

View = Callable[[SessionState], Any]

LOGIN_PATH = "/login"


@dataclass(frozen=True)
class Rendered:
    path: str
    content: Any
    redirected_from: Optional[str] = None


class RouteGuard:
    """Wraps a view; renders it only for an authenticated session."""

    def __init__(self, view: View, *, redirect_to: str = LOGIN_PATH):
        self.view = view
        self.redirect_to = redirect_to

    def permits(self, session: SessionState) -> bool:
        return session.is_authenticated


class Router:
    def __init__(self, session: SessionState, *, login_path: str = LOGIN_PATH):
        self.session = session
        self.login_path = login_path
        self._routes: Dict[str, View | RouteGuard] = {}
        self.history: List[str] = []
        self.current: Optional[Rendered] = None
        self._unsubscribe = session.subscribe(self._on_session_change)

    def add(self, path: str, view: View, *, protected: bool = False) -> None:
        self._routes[path] = RouteGuard(view, redirect_to=self.login_path) if protected else view

    def is_protected(self, path: str) -> bool:
        return isinstance(self._routes.get(path), RouteGuard)

    def navigate(self, path: str) -> Rendered:
        return self._render(path, replace=False)

    def _render(self, path: str, *, replace: bool, redirected_from: Optional[str] = None) -> Rendered:
        route = self._routes.get(path)
        if route is None and path != self.login_path:
            return self._render(self.login_path, replace=replace, redirected_from=path)

        if isinstance(route, RouteGuard):
            if not route.permits(self.session):
                logger.debug("Guard redirected %s -> %s", path, route.redirect_to)
                # Redirects replace the current history entry instead of pushing one.
                return self._render(route.redirect_to, replace=True, redirected_from=path)
            content = route.view(self.session)
        else:
            content = route(self.session) if route is not None else None

        if replace and self.history:
            self.history[-1] = path
        else:
            self.history.append(path)
        self.current = Rendered(path=path, content=content, redirected_from=redirected_from)
        return self.current

    def _on_session_change(self, session: SessionState) -> None:
        if self.current is not None and self.is_protected(self.current.path):
            self._render(self.current.path, replace=True)

    def close(self) -> None:
        self._unsubscribe()


def _placeholder(title: str) -> View:
    def view(session: SessionState) -> str:
        return title

    return view


def build_router(session: SessionState) -> Router:
    """The application's route table."""
    router = Router(session)
    router.add(LOGIN_PATH, _placeholder("Login"))
    router.add("/register", _placeholder("Create your account"))
    router.add("/", _placeholder("Login"))
    router.add("/dashboard", _placeholder("Dashboard"), protected=True)
    router.add("/chat", _placeholder("Chat"), protected=True)
    router.add("/prep-plan", _placeholder("Prep Plan Coming Soon"), protected=True)
    router.add("/job-roles", _placeholder("Job Roles Coming Soon"), protected=True)
    return router
