"""Role gate predicate, kept free of any transport concerns."""

from __future__ import annotations

from typing import Iterable, Optional


def allowed(role: Optional[str], required_roles: Iterable[str]) -> bool:
    """True when ``role`` is one of ``required_roles``."""
    if role is None:
        return False
    return role in set(required_roles)
