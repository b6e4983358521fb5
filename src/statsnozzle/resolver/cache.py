"""Application identity cache.

Maps an application GUID to its app, space and org names. The first time a
GUID is seen the configured lookup (normally ``CFClient.get_app``) is called;
successful results are kept for the life of the process, failures are not
cached so the next occurrence of that GUID tries again.

Usage::

    cache = IdentityCache(lookup=handle.get_app)
    identity = cache.resolve("6f1b2c9e-...")
    print(identity.key)   # "my-org/dev/my-app"
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from ..errors import ResolutionFailed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedIdentity:
    """App, space and org names plus their GUIDs."""

    app_name: str
    app_id: str
    space_name: str
    space_id: str
    org_name: str
    org_id: str

    @property
    def key(self) -> str:
        """Composite tally key: ``org/space/app``."""
        return f"{self.org_name}/{self.space_name}/{self.app_name}"


Lookup = Callable[[str], ResolvedIdentity]


class IdentityCache:
    """Write-through, never-evicting cache in front of an identity lookup.

    Not thread-safe on its own: the aggregator calls :meth:`resolve` while
    holding its lock, which also keeps two misses for the same GUID from
    racing each other.
    """

    def __init__(self, lookup: Lookup) -> None:
        self._lookup = lookup
        self._entries: dict[str, ResolvedIdentity] = {}
        self.lookups = 0

    def resolve(self, app_id: str) -> ResolvedIdentity:
        """Return the identity for app_id, calling the lookup on a miss.

        Raises ResolutionFailed when the lookup fails; nothing is cached.
        """
        cached = self._entries.get(app_id)
        if cached is not None:
            return cached

        self.lookups += 1
        try:
            identity = self._lookup(app_id)
        except ResolutionFailed:
            raise
        except Exception as exc:
            raise ResolutionFailed(app_id, exc) from exc

        self._entries[app_id] = identity
        logger.debug("resolved app %s -> %s", app_id, identity.key)
        return identity

    def get(self, app_id: str) -> ResolvedIdentity | None:
        return self._entries.get(app_id)

    def __contains__(self, app_id: object) -> bool:
        return app_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
