# recorder/service.py
from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from recorder.blueprint.assembler import AssemblyResult, BlueprintContext, BlueprintSettings, ManifestAssembler
from recorder.blueprint.models import Blueprint
from recorder.blueprint.presentation import NOTICE_PLUGIN_PATH, buildSkippedNoticeSteps
from recorder.capture.classify import CaptureFilter
from recorder.capture.log import MutationCaptureLog
from recorder.capture.models import CapturedMutation, CaptureState, ClearOutcome
from recorder.host.types import (
    Authorizer,
    CatalogLookup,
    MutationRecordStore,
    RecordingSettings,
    SiteHost,
    TtlCache,
)
from recorder.resources.resolver import ResolverSettings, ResourceResolver

logger = logging.getLogger(__name__)

__all__ = ["DEFAULT_SITE_OPTIONS", "BlueprintRecorder"]

DEFAULT_SITE_OPTIONS: tuple[str, ...] = (
    "blogname",
    "blogdescription",
    "start_of_week",
    "timezone_string",
    "date_format",
    "time_format",
    "permalink_structure",
    "rss_use_excerpt",
)



class BlueprintRecorder:
    """
    Entry point used by the host integration (web router, CLI):

      - generateManifest(context)       → AssemblyResult
      - observeStatement(text)          → text (query hook)
      - clearCapturedMutations(allowed) → ClearOutcome
    """

    def __init__(
        self,
        *,
        host: SiteHost,
        resolver: ResourceResolver,
        captureLog: MutationCaptureLog,
        authorizer: Authorizer | None = None,
        blueprintSettings: BlueprintSettings | None = None,
        siteOptionNames: Sequence[str] = DEFAULT_SITE_OPTIONS,
        noticePluginPath: str = NOTICE_PLUGIN_PATH,
    ) -> None:
        self.host = host
        self.resolver = resolver
        self.captureLog = captureLog
        self.authorizer = authorizer
        self.siteOptionNames = tuple(siteOptionNames)
        self.noticePluginPath = noticePluginPath
        self.assembler = ManifestAssembler(
            resolver=resolver,
            captureLog=captureLog,
            settings=blueprintSettings,
        )

    @classmethod
    def fromConfig(
        cls,
        *,
        host: SiteHost,
        catalog: CatalogLookup,
        cache: TtlCache,
        store: MutationRecordStore,
        recordingSettings: RecordingSettings,
        authorizer: Authorizer | None = None,
    ) -> "BlueprintRecorder":
        """Wires every component from the global configuration."""
        from recorder.app.globals import config
        resolver = ResourceResolver(catalog=catalog, cache=cache, settings=ResolverSettings.fromConfig())
        captureLog = MutationCaptureLog(
            store=store,
            settings=recordingSettings,
            captureFilter=CaptureFilter.fromConfig(),
        )
        return cls(
            host=host,
            resolver=resolver,
            captureLog=captureLog,
            authorizer=authorizer,
            blueprintSettings=BlueprintSettings.fromConfig(),
            siteOptionNames=list(config("blueprint.siteOptions", list(DEFAULT_SITE_OPTIONS))),
            noticePluginPath=str(config("blueprint.noticePluginPath", NOTICE_PLUGIN_PATH)),
        )

    # ----- Blueprint -----

    def buildContext(
        self,
        *,
        exclude: Iterable[str] = (),
        excludeAllUnits: bool = False,
        excludeTheme: bool = False,
        selectedMutations: Iterable[int] = (),
        replayAllMutations: bool = False,
        extraSteps: Sequence = (),
    ) -> BlueprintContext:
        """Snapshots the host into a BlueprintContext."""
        return BlueprintContext(
            units=self.host.activeUnits(),
            themeSlug=self.host.themeSlug() or None,
            exclude=frozenset(slug.strip() for slug in exclude if slug and slug.strip()),
            excludeAllUnits=excludeAllUnits,
            excludeTheme=excludeTheme,
            siteOptions={name: self.host.getOption(name) for name in self.siteOptionNames},
            selectedMutations=tuple(sorted({int(sequence) for sequence in selectedMutations})),
            replayAllMutations=replayAllMutations,
            extraSteps=tuple(extraSteps),
            platformVersions=self.host.platformVersions(),
        )

    def generateManifest(self, context: BlueprintContext) -> AssemblyResult:
        return self.assembler.assemble(context)

    def generateWithNotice(self, context: BlueprintContext) -> tuple[Blueprint, AssemblyResult]:
        """
        Like generateManifest(), plus the admin-notice mu-plugin steps listing
        unavailable items, appended after everything else.
        """
        result = self.generateManifest(context)
        noticeSteps = buildSkippedNoticeSteps(result.unavailableIds, path=self.noticePluginPath)
        blueprint = result.blueprint.withSteps(noticeSteps) if noticeSteps else result.blueprint
        return blueprint, result

    # ----- Capture -----

    def observeStatement(self, statementText: str, *, background: bool = False) -> str:
        return self.captureLog.observe(statementText, background=background)

    def capturedMutations(self) -> list[CapturedMutation]:
        return self.captureLog.listCaptured()

    def clearCapturedMutations(self, callerIsAuthorized: bool | None = None) -> ClearOutcome:
        """
        `callerIsAuthorized` overrides the configured Authorizer. Without
        either, clearing is denied.
        """
        if callerIsAuthorized is None:
            callerIsAuthorized = self.authorizer.isAuthorizedToClear() if self.authorizer else False
        return self.captureLog.clear(callerIsAuthorized)

    def setRecording(self, enabled: bool) -> CaptureState:
        self.captureLog.settings.setRecordingEnabled(enabled)
        return self.captureLog.state
