# recorder/cli.py
from __future__ import annotations
import argparse
import logging
import sys
from collections.abc import Sequence

from recorder.app.globals import initConfig
from recorder.blueprint.presentation import playgroundUrl
from recorder.capture.settings import ConfigRecordingSettings, InMemoryRecordingSettings
from recorder.capture.store import InMemoryMutationStore, Json5FileMutationStore
from recorder.config.service import ConfigService
from recorder.core.errors import ConfigValidationError
from recorder.core.logging import configureLogging
from recorder.host.site import StaticAuthorizer, StaticSiteHost
from recorder.host.types import CatalogLookup, MutationRecordStore, RecordingSettings
from recorder.http.catalog import WordPressOrgCatalog
from recorder.resources.cache import MemoryTtlCache
from recorder.service import BlueprintRecorder

logger = logging.getLogger(__name__)

__all__ = ["buildParser", "main"]



def _csv(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]



def buildParser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blueprint-recorder",
        description="Compile a WordPress Playground blueprint from a site snapshot.",
    )
    parser.add_argument("--config", help="Site-local JSON5 config overrides")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    def addSiteArgs(cmd: argparse.ArgumentParser) -> None:
        cmd.add_argument("--site", required=True, help="JSON5 site snapshot (plugins, theme, options, versions)")
        cmd.add_argument("--mutations", help="JSON5 file with captured mutations")

    def addBuildArgs(cmd: argparse.ArgumentParser) -> None:
        addSiteArgs(cmd)
        cmd.add_argument("--ignore", type=_csv, default=[], help="Comma separated slugs to leave out")
        cmd.add_argument("--ignore-all-plugins", action="store_true")
        cmd.add_argument("--ignore-theme", action="store_true")
        cmd.add_argument(
            "--replay",
            default="all",
            help="Mutation sequences to replay: 'all', 'none' or a comma separated list",
        )
        cmd.add_argument("--no-notice", action="store_true", help="Do not add the skipped-plugins admin notice")

    build = sub.add_parser("build", help="Print the blueprint JSON")
    addBuildArgs(build)
    build.add_argument("--pretty", action="store_true")

    link = sub.add_parser("playground-url", help="Print a Playground launch link")
    addBuildArgs(link)

    serve = sub.add_parser("serve", help="Serve the blueprint endpoint for a site snapshot")
    addSiteArgs(serve)
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8765)
    serve.add_argument("--allow-clear", action="store_true", help="Allow DELETE /mutations")

    return parser



def _parseReplay(value: str) -> tuple[list[int], bool]:
    value = value.strip().lower()
    if value == "all":
        return [], True
    if value in ("", "none"):
        return [], False
    return [int(part) for part in _csv(value)], False



def _makeRecorder(
    args: argparse.Namespace,
    *,
    catalog: CatalogLookup,
    store: MutationRecordStore,
    recordingSettings: RecordingSettings,
) -> BlueprintRecorder:
    return BlueprintRecorder.fromConfig(
        host=StaticSiteHost.fromFile(args.site),
        catalog=catalog,
        cache=MemoryTtlCache(),
        store=store,
        recordingSettings=recordingSettings,
        authorizer=StaticAuthorizer(allowed=bool(getattr(args, "allow_clear", False))),
    )



def _build(args: argparse.Namespace, recorder: BlueprintRecorder) -> int:
    try:
        selected, replayAll = _parseReplay(args.replay)
    except ValueError:
        logger.error("Invalid --replay value '%s'", args.replay)
        return 2

    context = recorder.buildContext(
        exclude=args.ignore,
        excludeAllUnits=args.ignore_all_plugins,
        excludeTheme=args.ignore_theme,
        selectedMutations=selected,
        replayAllMutations=replayAll,
    )
    if args.no_notice:
        result = recorder.generateManifest(context)
        blueprint = result.blueprint
    else:
        blueprint, result = recorder.generateWithNotice(context)

    for item in result.skipped:
        logger.info("Skipped %s '%s' (%s)", item.kind, item.id, item.reason)

    if args.command == "playground-url":
        print(playgroundUrl(blueprint))
    else:
        print(blueprint.toJson(pretty=args.pretty))
    return 0



def _serve(args: argparse.Namespace, recorder: BlueprintRecorder) -> int:
    import uvicorn
    from recorder.app.factory import createApp

    app = createApp(recorder, setupLogging=False)
    uvicorn.run(app, host=args.host, port=args.port, log_config=None)
    return 0



def main(argv: Sequence[str] | None = None, *, catalog: CatalogLookup | None = None) -> int:
    args = buildParser().parse_args(argv)

    overrides = {"debug": {"devModeEnabled": True}} if args.verbose else None
    configService = initConfig(ConfigService.bootstrap(siteConfigPath=args.config, overrides=overrides))
    configureLogging()

    try:
        store = Json5FileMutationStore(args.mutations) if args.mutations else InMemoryMutationStore()
    except ValueError as err:
        logger.error("Cannot read mutations file: %s", err)
        return 2

    if args.command == "serve":
        recordingSettings: RecordingSettings = ConfigRecordingSettings(configService.globalStore)
    else:
        # A snapshot is replayed, never recorded into
        recordingSettings = InMemoryRecordingSettings(enabled=False)

    ownsCatalog = catalog is None
    activeCatalog = catalog or WordPressOrgCatalog.fromConfig()
    try:
        try:
            recorder = _makeRecorder(args, catalog=activeCatalog, store=store, recordingSettings=recordingSettings)
        except ConfigValidationError as err:
            logger.error("Invalid configuration: %s", err)
            return 2
        except (OSError, ValueError, TypeError) as err:
            logger.error("Cannot read site snapshot '%s': %s", args.site, err)
            return 2

        if args.command == "serve":
            return _serve(args, recorder)
        return _build(args, recorder)
    finally:
        if ownsCatalog and isinstance(activeCatalog, WordPressOrgCatalog):
            activeCatalog.close()



if __name__ == "__main__":
    sys.exit(main())
