# recorder/resources/resolver.py
from __future__ import annotations

import logging
from dataclasses import dataclass

from recorder.core.errors import ConfigValidationError
from recorder.core.logging import setLogContext
from recorder.host.types import CatalogEntry, CatalogLookup, TtlCache
from recorder.resources.cache import namespacedKey
from recorder.resources.descriptors import (
    UNAVAILABLE,
    RegistryResource,
    UnavailableResource,
    UrlResource,
    descriptorFromCache,
    mirroredArchiveResource,
    pluginResource,
)

logger = logging.getLogger(__name__)

__all__ = ["ResolverSettings", "ResourceResolver"]

Descriptor = RegistryResource | UrlResource | UnavailableResource



@dataclass(frozen=True)
class ResolverSettings:
    cacheTtlSeconds: int = 86400
    pluginCacheNamespace: str = "blueprint_recorder_plugin_zip"
    themeCacheNamespace: str = "blueprint_recorder_theme_exists"
    registryPrefix: str = "https://downloads.wordpress.org/plugin/"
    proxyEndpoint: str = "https://github-proxy.com/proxy/"
    selfSlug: str = "blueprint-recorder"
    selfArchiveUrl: str = "https://github.com/akirk/blueprint-recorder/archive/refs/heads/main.zip"

    @classmethod
    def fromConfig(cls) -> "ResolverSettings":
        from recorder.app.globals import config
        defaults = cls()
        return cls(
            cacheTtlSeconds=int(config("resolver.cacheTtlSeconds", defaults.cacheTtlSeconds)),
            pluginCacheNamespace=str(config("resolver.pluginCacheNamespace", defaults.pluginCacheNamespace)),
            themeCacheNamespace=str(config("resolver.themeCacheNamespace", defaults.themeCacheNamespace)),
            registryPrefix=str(config("resolver.registryPrefix", defaults.registryPrefix)),
            proxyEndpoint=str(config("resolver.proxyEndpoint", defaults.proxyEndpoint)),
            selfSlug=str(config("resolver.selfSlug", defaults.selfSlug)),
            selfArchiveUrl=str(config("resolver.selfArchiveUrl", defaults.selfArchiveUrl)),
        )



class ResourceResolver:
    """
    Maps a plugin slug to where Playground can download it from.

    Fallback chain: self slug → cache → catalog download link, which is
    accepted only when it points at the WordPress.org mirror or at a
    GitHub branch/tag archive. Everything else resolves to UNAVAILABLE.

    Every answer that did not come from the cache is written back for
    `cacheTtlSeconds`, negative answers included, so a slug costs at most
    one catalog query per TTL window.
    """

    def __init__(self, *, catalog: CatalogLookup, cache: TtlCache, settings: ResolverSettings | None = None) -> None:
        self.catalog = catalog
        self.cache = cache
        self.settings = settings or ResolverSettings()
        self._writtenKeys: set[str] = set()

        selfResource = mirroredArchiveResource(self.settings.selfArchiveUrl, proxyEndpoint=self.settings.proxyEndpoint)
        if selfResource is None:
            raise ConfigValidationError(f"resolver.selfArchiveUrl '{self.settings.selfArchiveUrl}' is not a GitHub archive URL")
        self._selfResource: UrlResource = selfResource

    # ----- Plugins -----

    def resolve(self, slug: str) -> Descriptor:
        # The recorder's own archive location is static; it never goes through the cache.
        if slug == self.settings.selfSlug:
            return self._selfResource

        key = namespacedKey(self.settings.pluginCacheNamespace, slug)
        cached = descriptorFromCache(self.cache.get(key))
        if cached is not None:
            logger.debug("Resolver cache hit for '%s' (%s)", slug, cached.kind)
            return cached

        setLogContext(slug=slug)
        descriptor = self._resolveFromCatalog(slug)
        self._remember(key, descriptor.model_dump())
        return descriptor

    def _resolveFromCatalog(self, slug: str) -> Descriptor:
        try:
            entry = self.catalog.lookupExtension(slug)
        except Exception as err:
            logger.warning("Catalog lookup failed for plugin '%s': %s", slug, err)
            return UNAVAILABLE

        if not entry.found or not entry.downloadUrl:
            logger.info("Plugin '%s' not found in catalog", slug)
            return UNAVAILABLE

        return self.descriptorForDownload(slug, entry)

    def descriptorForDownload(self, slug: str, entry: CatalogEntry) -> Descriptor:
        url = entry.downloadUrl or ""
        if url.startswith(self.settings.registryPrefix):
            return pluginResource(slug)

        mirrored = mirroredArchiveResource(url, proxyEndpoint=self.settings.proxyEndpoint)
        if mirrored is not None:
            logger.debug("Plugin '%s' mirrored from '%s'", slug, url)
            return mirrored

        logger.info("Plugin '%s' has an unsupported download location '%s'", slug, url)
        return UNAVAILABLE

    # ----- Themes -----

    def themeExists(self, slug: str) -> bool:
        if not slug:
            return False

        key = namespacedKey(self.settings.themeCacheNamespace, slug)
        cached = self.cache.get(key)
        if isinstance(cached, bool):
            return cached

        try:
            exists = bool(self.catalog.lookupTheme(slug).found)
        except Exception as err:
            logger.warning("Catalog lookup failed for theme '%s': %s", slug, err)
            exists = False

        self._remember(key, exists)
        return exists

    # ----- Cache maintenance -----

    def _remember(self, key: str, value: object) -> None:
        self.cache.set(key, value, self.settings.cacheTtlSeconds)
        self._writtenKeys.add(key)

    def invalidate(self, slug: str | None = None) -> int:
        """
        Drops cached answers for `slug` (plugin and theme), or every entry
        this resolver wrote when `slug` is None. Returns the number of keys dropped.
        """
        if slug is None:
            keys = set(self._writtenKeys)
        else:
            keys = {
                namespacedKey(self.settings.pluginCacheNamespace, slug),
                namespacedKey(self.settings.themeCacheNamespace, slug),
            } & self._writtenKeys

        for key in keys:
            self.cache.delete(key)
        self._writtenKeys -= keys
        return len(keys)
