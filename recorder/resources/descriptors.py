# recorder/resources/descriptors.py
from __future__ import annotations
import re
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

__all__ = [
    "PLUGIN_REGISTRY",
    "THEME_REGISTRY",
    "GITHUB_ARCHIVE_RE",
    "RegistryResource",
    "UrlResource",
    "LiteralResource",
    "UnavailableResource",
    "ResourceDescriptor",
    "FileResource",
    "UNAVAILABLE",
    "pluginResource",
    "themeResource",
    "mirroredArchiveResource",
    "descriptorFromCache",
]

PLUGIN_REGISTRY = "wordpress.org/plugins"
THEME_REGISTRY = "wordpress.org/themes"

# Only GitHub branch/tag archives are mirrored. owner, repo and ref are
# restricted so nothing from the catalog can smuggle query syntax into the proxy URL.
GITHUB_ARCHIVE_RE = re.compile(
    r"^https://github\.com/(?P<repo>[A-Za-z0-9_.\-]+/[A-Za-z0-9_.\-]+)"
    r"/archive/refs/(?P<refKind>heads|tags)/(?P<ref>[A-Za-z0-9_.\-]+)\.zip$"
)



class _Resource(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)



class RegistryResource(_Resource):
    """Artifact served by the WordPress.org plugin or theme directory."""
    resource: Literal["wordpress.org/plugins", "wordpress.org/themes"]
    slug: str = Field(min_length=1)

    @property
    def kind(self) -> str:
        return "registry"



class UrlResource(_Resource):
    """Artifact fetched from a URL (GitHub archives go through the proxy)."""
    resource: Literal["url"]
    url: str = Field(min_length=1)

    @property
    def kind(self) -> str:
        return "mirroredUrl"



class LiteralResource(_Resource):
    """Inline file contents, used for the replay SQL script."""
    resource: Literal["literal"]
    name: str
    contents: str

    @property
    def kind(self) -> str:
        return "literal"



class UnavailableResource(_Resource):
    """Resolution failed. Never written into a blueprint step."""
    resource: Literal["unavailable"] = "unavailable"

    @property
    def kind(self) -> str:
        return "unavailable"



ResourceDescriptor = Annotated[
    Union[RegistryResource, UrlResource, UnavailableResource],
    Field(discriminator="resource"),
]

# Anything a step may reference on the wire
FileResource = Annotated[
    Union[RegistryResource, UrlResource, LiteralResource],
    Field(discriminator="resource"),
]

UNAVAILABLE = UnavailableResource()

_descriptorAdapter: TypeAdapter[Any] = TypeAdapter(ResourceDescriptor)



def pluginResource(slug: str) -> RegistryResource:
    return RegistryResource(resource=PLUGIN_REGISTRY, slug=slug)



def themeResource(slug: str) -> RegistryResource:
    return RegistryResource(resource=THEME_REGISTRY, slug=slug)



def mirroredArchiveResource(archiveUrl: str, *, proxyEndpoint: str) -> UrlResource | None:
    """
    Rewrites a GitHub archive URL into a proxied download:

        https://github.com/owner/repo/archive/refs/tags/v1.2.zip
        → <proxyEndpoint>?repo=owner/repo&release=v1.2

    Returns None when `archiveUrl` does not match GITHUB_ARCHIVE_RE.
    """
    match = GITHUB_ARCHIVE_RE.match(archiveUrl or "")
    if match is None:
        return None
    return UrlResource(
        resource="url",
        url=f"{proxyEndpoint}?repo={match.group('repo')}&release={match.group('ref')}",
    )



def descriptorFromCache(value: Any) -> RegistryResource | UrlResource | UnavailableResource | None:
    """
    Re-validates a cached descriptor dump. Returns None for anything that
    does not parse, so a corrupted cache entry reads as a miss.
    """
    if value is None:
        return None
    try:
        return _descriptorAdapter.validate_python(value)
    except ValueError:
        return None
