# recorder/planning/units.py
from __future__ import annotations
from collections.abc import Iterable
from dataclasses import dataclass, field

from recorder.resources.descriptors import RegistryResource, UnavailableResource, UrlResource

__all__ = ["InstallableUnit", "PlannedStep", "slugFromPluginFile", "parseRequiresHeader", "unitFromPluginFile"]



def _normalizeRequires(requires: Iterable[str]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for slug in requires:
        slug = str(slug).strip()
        if slug:
            seen.setdefault(slug, None)
    return tuple(seen)



@dataclass(frozen=True)
class InstallableUnit:
    """
    An active plugin. `requires` keeps declaration order (duplicates
    dropped) so planning stays deterministic.
    """
    id: str
    displayName: str = ""
    requires: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("InstallableUnit.id must be a non-empty slug")
        if not self.displayName:
            object.__setattr__(self, "displayName", self.id)
        object.__setattr__(self, "requires", _normalizeRequires(self.requires))



@dataclass(frozen=True)
class PlannedStep:
    unit: InstallableUnit
    resource: RegistryResource | UrlResource | UnavailableResource
    annotation: str | None = None



def slugFromPluginFile(pluginFile: str) -> str:
    """
    'akismet/akismet.php' → 'akismet'
    'hello.php'           → 'hello'
    """
    head = str(pluginFile).strip().split("/", 1)[0]
    if head.endswith(".php") and "/" not in pluginFile:
        head = head[: -len(".php")]
    return head



def parseRequiresHeader(value: str | None) -> tuple[str, ...]:
    """Parses a `Requires Plugins: a, b` header value into slugs."""
    if not value:
        return ()
    return _normalizeRequires(part for part in value.split(","))



def unitFromPluginFile(
    pluginFile: str,
    *,
    name: str | None = None,
    requiresPlugins: str | Iterable[str] | None = None,
) -> InstallableUnit:
    if isinstance(requiresPlugins, str) or requiresPlugins is None:
        requires = parseRequiresHeader(requiresPlugins)
    else:
        requires = _normalizeRequires(requiresPlugins)
    return InstallableUnit(id=slugFromPluginFile(pluginFile), displayName=name or "", requires=requires)
