from __future__ import annotations

import logging
from typing import Callable, Generic, Iterable, List, Optional, Tuple, TypeVar

T = TypeVar("T")

Resolver = Callable[[], Optional[T]]


class ResolverChain(Generic[T]):
    """
    Prioritized list of resolvers tried in order; the first non-None
    value wins. Exceptions listed in `tolerate` are logged and treated
    as "no value" so the chain can move on to the next resolver.
    """

    def __init__(
            self,
            resolvers: Iterable[Tuple[str, Resolver[T]]],
            tolerate: Tuple[type[BaseException], ...] = (),
            logger: logging.Logger | None = None,
    ):
        self._resolvers: List[Tuple[str, Resolver[T]]] = list(resolvers)
        self._tolerate = tolerate
        self._logger = logger or logging.getLogger("admissions")

    def resolve_with_source(self) -> Tuple[Optional[T], Optional[str]]:
        for name, resolver in self._resolvers:
            try:
                value = resolver()
            except self._tolerate as exc:
                self._logger.warning("Resolver %s failed, trying next: %s", name, exc)
                continue
            if value is not None:
                return value, name
        return None, None

    def resolve(self) -> Optional[T]:
        value, _ = self.resolve_with_source()
        return value
