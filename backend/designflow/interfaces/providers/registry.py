"""Simple dependency injection container with provider registry support."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class ProviderRegistry(Generic[T]):
    """Maps provider keys (e.g., backend names) to lazily constructed instances."""

    factory_map: Dict[str, Callable[[], T]] = field(default_factory=dict)
    _cache: Dict[str, T] = field(default_factory=dict, init=False, repr=False)

    def register(self, key: str, factory: Callable[[], T]) -> None:
        if key in self.factory_map:
            raise ValueError(f"Provider '{key}' already registered")
        self.factory_map[key] = factory
        if key in self._cache:
            del self._cache[key]

    def resolve(self, key: str) -> T:
        if key in self._cache:
            return self._cache[key]
        try:
            factory = self.factory_map[key]
        except KeyError as exc:
            raise KeyError(f"Provider '{key}' not found") from exc
        instance = factory()
        self._cache[key] = instance
        return instance

    def reset(self) -> None:
        self._cache.clear()


@dataclass
class Container:
    """Minimal DI container orchestrating provider registries."""

    record_stores: ProviderRegistry[Any] = field(default_factory=ProviderRegistry)
    object_storages: ProviderRegistry[Any] = field(default_factory=ProviderRegistry)
    change_feeds: ProviderRegistry[Any] = field(default_factory=ProviderRegistry)
    session_providers: ProviderRegistry[Any] = field(default_factory=ProviderRegistry)

    def resolve_record_store(self, key: Optional[str] = None) -> Any:
        target = key or self._default("RECORD_STORE", "memory")
        return self.record_stores.resolve(target)

    def resolve_object_storage(self, key: Optional[str] = None) -> Any:
        target = key or self._default("OBJECT_STORAGE", "memory")
        return self.object_storages.resolve(target)

    def resolve_change_feed(self, key: Optional[str] = None) -> Any:
        target = key or self._default("CHANGE_FEED", "memory")
        return self.change_feeds.resolve(target)

    def resolve_session_provider(self, key: Optional[str] = None) -> Any:
        target = key or self._default("SESSION_PROVIDER", "static")
        return self.session_providers.resolve(target)

    def reset(self) -> None:
        for registry in (
            self.record_stores,
            self.object_storages,
            self.change_feeds,
            self.session_providers,
        ):
            registry.reset()

    def _default(self, attr: str, fallback: str) -> str:
        from designflow.config import settings

        return getattr(settings, attr, fallback)
