# recorder/resources/__init__.py
from .cache import MemoryTtlCache
from .descriptors import (
    UNAVAILABLE,
    RegistryResource,
    UrlResource,
    LiteralResource,
    UnavailableResource,
    ResourceDescriptor,
)
from .resolver import ResolverSettings, ResourceResolver
