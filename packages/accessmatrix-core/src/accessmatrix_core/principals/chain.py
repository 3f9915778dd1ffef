"""Chain-of-responsibility dispatch over principal resolvers, with memoization."""

from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel

from accessmatrix_core.errors import PrincipalResolutionError, UnsupportedPrincipalError
from accessmatrix_core.helpers import describe, has_method
from accessmatrix_core.interfaces.principal import PrincipalResolver, ResolvedPrincipal
from accessmatrix_core.principals.resolvers import default_resolvers
from accessmatrix_core.reference.references import StackReferences

logger = logging.getLogger(__name__)

DEFAULT_CACHE_SIZE = 1000


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump()
    raise TypeError(f"not plain data: {type(value).__name__}")


def cache_key(principal: Any, principal_index: int) -> str:
    """Cache key over the principal's full content and its index.

    Plain data (strings, mappings, lists, pydantic models) is keyed by a
    sha256 of its complete canonical JSON. Opaque objects are keyed by
    identity; the cache keeps them alive so the identity stays valid.
    """
    if isinstance(principal, str):
        return f"str:{principal}:{principal_index}"
    try:
        payload = json.dumps(principal, sort_keys=True, default=_json_default)
    except (TypeError, ValueError):
        return f"ref:{type(principal).__qualname__}:{id(principal)}:{principal_index}"
    digest = hashlib.sha256(payload.encode()).hexdigest()
    return f"obj:{digest}:{principal_index}"


def expand_principals(principals: Any) -> list[Any]:
    """Flatten bulk containers (anything with ``get_accounts()``) and drop Nones.

    A single non-list value is treated as a one-element list.
    """
    if principals is None:
        return []
    if not isinstance(principals, (list, tuple)):
        principals = [principals]

    expanded: list[Any] = []
    for principal in principals:
        if principal is None:
            continue
        if has_method(principal, "get_accounts"):
            accounts: Mapping[str, Any] = principal.get_accounts()
            expanded.extend(a for a in accounts.values() if a is not None)
        else:
            expanded.append(principal)
    return expanded


def deduplicate(principals: Iterable[Any]) -> list[Any]:
    """Drop repeats by identity or equality of the raw values, keeping first-seen order."""
    unique: list[Any] = []
    for principal in principals:
        if any(principal is seen or principal == seen for seen in unique):
            continue
        unique.append(principal)
    return unique


class PrincipalResolverChain:
    """Classifies principal values and resolves them to (member, identifier).

    Resolvers are tried in registration order; the first whose
    ``can_resolve`` accepts the value wins. Successful resolutions are
    cached until the cache holds ``max_cache_size`` entries, after which
    new results are computed but no longer stored.
    """

    def __init__(
        self,
        resolvers: Iterable[tuple[str, PrincipalResolver]] | None = None,
        *,
        references: StackReferences | None = None,
        max_cache_size: int = DEFAULT_CACHE_SIZE,
    ) -> None:
        self.max_cache_size = max_cache_size
        self._resolvers: dict[str, PrincipalResolver] = {}
        self._cache: dict[str, tuple[Any, ResolvedPrincipal]] = {}
        self._cache_full_logged = False
        table = resolvers if resolvers is not None else default_resolvers(references)
        for name, resolver in table:
            self.register(name, resolver)

    # -- Registry -------------------------------------------------------------

    def register(self, name: str, resolver: PrincipalResolver) -> None:
        """Append *resolver* to the chain (re-registering a name keeps its slot)."""
        if not isinstance(resolver, PrincipalResolver):
            raise TypeError(f"{resolver!r} does not implement PrincipalResolver")
        self._resolvers[name] = resolver

    def registered_types(self) -> list[str]:
        return list(self._resolvers)

    def is_supported(self, principal: Any) -> bool:
        return self._find_resolver(principal) is not None

    def clear(self) -> None:
        """Remove every resolver and cached resolution."""
        self._resolvers.clear()
        self.clear_cache()

    def clear_cache(self) -> None:
        self._cache.clear()
        self._cache_full_logged = False
        logger.debug("Principal resolution cache cleared")

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    # -- Resolution -----------------------------------------------------------

    def resolve(self, principal: Any, principal_index: int) -> ResolvedPrincipal:
        """Resolve one principal; raises UnsupportedPrincipalError if nothing claims it."""
        key = cache_key(principal, principal_index)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Using cached resolution for principal %s", key)
            return cached[1]

        resolver = self._find_resolver(principal)
        if resolver is None:
            raise UnsupportedPrincipalError(
                type(principal).__name__, describe(principal), self.registered_types()
            )

        try:
            resolved = resolver.resolve(principal, principal_index)
        except Exception as exc:
            raise PrincipalResolutionError(principal_index, exc) from exc

        if len(self._cache) < self.max_cache_size:
            self._cache[key] = (principal, resolved)
        elif not self._cache_full_logged:
            logger.warning(
                "Principal resolution cache limit (%d) reached, skipping caching",
                self.max_cache_size,
            )
            self._cache_full_logged = True
        return resolved

    def resolve_many(self, principals: Any, start_index: int = 0) -> list[ResolvedPrincipal]:
        """Expand, deduplicate, then resolve each principal with consecutive indices."""
        unique = deduplicate(expand_principals(principals))
        return [self.resolve(p, start_index + i) for i, p in enumerate(unique)]

    def _find_resolver(self, principal: Any) -> PrincipalResolver | None:
        for resolver in self._resolvers.values():
            if resolver.can_resolve(principal):
                return resolver
        return None

    # Static helpers, exposed on the chain for callers holding only an instance.
    expand = staticmethod(expand_principals)
    deduplicate = staticmethod(deduplicate)
