# recorder/blueprint/assembler.py
from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

from recorder.blueprint.models import (
    Blueprint,
    InstallPluginStep,
    InstallThemeStep,
    RunSqlStep,
    SetSiteOptionsStep,
    StepProgress,
    UnzipStep,
    WriteFileStep,
    MkdirStep,
)
from recorder.capture.log import MutationCaptureLog
from recorder.planning.planner import planUnits
from recorder.planning.units import InstallableUnit, PlannedStep
from recorder.resources.descriptors import LiteralResource, RegistryResource, UrlResource, themeResource
from recorder.resources.resolver import ResourceResolver

logger = logging.getLogger(__name__)

__all__ = [
    "REPLAY_SCRIPT_NAME",
    "BlueprintSettings",
    "BlueprintContext",
    "SkippedItem",
    "AssemblyResult",
    "ManifestAssembler",
]

REPLAY_SCRIPT_NAME = "blueprint-recorder-replay.sql"

ContentStep = UnzipStep | WriteFileStep | MkdirStep



@dataclass(frozen=True)
class BlueprintSettings:
    landingPage: str = "/wp-admin/"
    phpExtensionBundles: tuple[str, ...] = ("kitchen-sink",)
    features: Mapping[str, bool] = field(default_factory=lambda: {"networking": True})
    login: bool = True

    @classmethod
    def fromConfig(cls) -> "BlueprintSettings":
        from recorder.app.globals import config
        return cls(
            landingPage=str(config("blueprint.landingPage", "/wp-admin/")),
            phpExtensionBundles=tuple(config("blueprint.phpExtensionBundles", ["kitchen-sink"])),
            features=dict(config("blueprint.features", {"networking": True})),
            login=bool(config("blueprint.login", True)),
        )



@dataclass(frozen=True)
class BlueprintContext:
    """Everything one assemble() call needs, gathered from the host and the request."""
    units: Sequence[InstallableUnit] = ()
    themeSlug: str | None = None
    exclude: frozenset[str] = frozenset()
    excludeAllUnits: bool = False
    excludeTheme: bool = False
    siteOptions: Mapping[str, Any] = field(default_factory=dict)
    selectedMutations: tuple[int, ...] = ()
    replayAllMutations: bool = False
    extraSteps: Sequence[ContentStep] = ()
    platformVersions: Mapping[str, str] = field(default_factory=dict)



@dataclass(frozen=True, slots=True)
class SkippedItem:
    id: str
    reason: Literal["excluded", "unavailable"]
    kind: Literal["plugin", "theme"] = "plugin"



@dataclass
class AssemblyResult:
    blueprint: Blueprint
    plan: list[PlannedStep] = field(default_factory=list)
    skipped: list[SkippedItem] = field(default_factory=list)

    @property
    def skippedIds(self) -> list[str]:
        return [item.id for item in self.skipped]

    @property
    def unavailableIds(self) -> list[str]:
        """What the admin notice lists: things that could not be resolved."""
        return [item.id for item in self.skipped if item.reason == "unavailable"]



class ManifestAssembler:
    """
    Builds the blueprint in a fixed step order:

      1. installPlugin per planned unit (the only place order changes)
      2. installTheme, when the theme is kept and exists on WordPress.org
      3. setSiteOptions, always exactly one
      4. runSql with the replay script, when a selection yields statements
      5. caller supplied content steps, unchanged

    Anything that cannot be resolved is skipped and reported in the
    result; assembling never fails because of a single plugin or theme.
    """

    def __init__(
        self,
        *,
        resolver: ResourceResolver,
        captureLog: MutationCaptureLog | None = None,
        settings: BlueprintSettings | None = None,
    ) -> None:
        self.resolver = resolver
        self.captureLog = captureLog
        self.settings = settings or BlueprintSettings()

    def assemble(self, context: BlueprintContext) -> AssemblyResult:
        skipped: list[SkippedItem] = []
        steps: list[Any] = []

        plan = self._planUnits(context, skipped)
        for planned in plan:
            steps.append(self._installPluginStep(planned))

        themeStep = self._themeStep(context, skipped)
        if themeStep is not None:
            steps.append(themeStep)

        steps.append(SetSiteOptionsStep(options=dict(context.siteOptions)))

        sqlStep = self._replayStep(context)
        if sqlStep is not None:
            steps.append(sqlStep)

        steps.extend(context.extraSteps)

        blueprint = Blueprint(
            landingPage=self.settings.landingPage,
            preferredVersions=dict(context.platformVersions),
            phpExtensionBundles=list(self.settings.phpExtensionBundles),
            features=dict(self.settings.features),
            login=self.settings.login,
            steps=steps,
        )

        if skipped:
            logger.info("Blueprint skipped: %s", ", ".join(f"{item.id} ({item.reason})" for item in skipped))
        return AssemblyResult(blueprint=blueprint, plan=plan, skipped=skipped)

    # ----- Plugins -----

    def _planUnits(self, context: BlueprintContext, skipped: list[SkippedItem]) -> list[PlannedStep]:
        kept: list[InstallableUnit] = []
        resources: dict[str, RegistryResource | UrlResource] = {}

        for unit in context.units:
            if context.excludeAllUnits or unit.id in context.exclude:
                skipped.append(SkippedItem(id=unit.id, reason="excluded"))
                continue

            resource = self.resolver.resolve(unit.id)
            if not isinstance(resource, (RegistryResource, UrlResource)):
                skipped.append(SkippedItem(id=unit.id, reason="unavailable"))
                continue

            kept.append(unit)
            resources[unit.id] = resource

        return planUnits(kept, resources)

    def _installPluginStep(self, planned: PlannedStep) -> InstallPluginStep:
        caption = f"Installing {planned.unit.displayName}"
        if planned.annotation:
            caption += f" ({planned.annotation})"
        return InstallPluginStep(
            pluginZipFile=planned.resource,
            progress=StepProgress(caption=caption),
        )

    # ----- Theme -----

    def _themeStep(self, context: BlueprintContext, skipped: list[SkippedItem]) -> InstallThemeStep | None:
        slug = context.themeSlug
        if not slug:
            return None

        if context.excludeTheme or slug in context.exclude:
            skipped.append(SkippedItem(id=slug, reason="excluded", kind="theme"))
            return None

        if not self.resolver.themeExists(slug):
            skipped.append(SkippedItem(id=slug, reason="unavailable", kind="theme"))
            return None

        return InstallThemeStep(themeZipFile=themeResource(slug))

    # ----- Replay -----

    def _replayStep(self, context: BlueprintContext) -> RunSqlStep | None:
        if self.captureLog is None:
            return None
        if not context.replayAllMutations and not context.selectedMutations:
            return None

        selection = None if context.replayAllMutations else context.selectedMutations
        script = self.captureLog.exportReplayScript(selection)
        if not script:
            return None
        return RunSqlStep(sql=LiteralResource(resource="literal", name=REPLAY_SCRIPT_NAME, contents=script))
