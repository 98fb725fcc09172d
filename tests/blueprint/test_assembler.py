# tests/blueprint/test_assembler.py
from __future__ import annotations

from datetime import datetime, timezone

import pytest

from recorder.blueprint.assembler import REPLAY_SCRIPT_NAME, BlueprintContext, BlueprintSettings, ManifestAssembler
from recorder.blueprint.models import Blueprint, MkdirStep, UnzipStep, WriteFileStep
from recorder.capture.log import MutationCaptureLog
from recorder.capture.settings import InMemoryRecordingSettings
from recorder.capture.store import InMemoryMutationStore
from recorder.planning.units import InstallableUnit
from recorder.resources.descriptors import UrlResource


@pytest.fixture()
def replayLog():
    store = InMemoryMutationStore()
    stamp = datetime(2024, 1, 1, tzinfo=timezone.utc)
    store.append(1, stamp, "INSERT INTO wp_posts VALUES (1)")
    store.append(2, stamp, "UPDATE wp_posts SET a=2")
    store.append(3, stamp, "UPDATE wp_posts SET a=3")
    return MutationCaptureLog(store=store, settings=InMemoryRecordingSettings())


@pytest.fixture()
def assembler(resolver, replayLog):
    return ManifestAssembler(resolver=resolver, captureLog=replayLog)


def _stepKinds(blueprint):
    return [step.step for step in blueprint.steps]


def _stepsOfKind(blueprint, kind):
    return [step for step in blueprint.steps if step.step == kind]


def _siteContext(**kwargs):
    defaults = dict(
        units=[
            InstallableUnit(id="woo-addon", displayName="Woo Addon", requires=("woocommerce",)),
            InstallableUnit(id="akismet", displayName="Akismet"),
            InstallableUnit(id="woocommerce", displayName="WooCommerce"),
        ],
        themeSlug="twentytwentyfour",
        siteOptions={"blogname": "My Site"},
        platformVersions={"php": "8.2", "wp": "6.6"},
    )
    defaults.update(kwargs)
    return BlueprintContext(**defaults)


# -------- step order --------

def test_full_step_order(assembler):
    extra = [MkdirStep(path="/wordpress/wp-content/uploads/demo")]
    result = assembler.assemble(_siteContext(replayAllMutations=True, extraSteps=extra))

    assert _stepKinds(result.blueprint) == [
        "installPlugin",
        "installPlugin",
        "installPlugin",
        "installTheme",
        "setSiteOptions",
        "runSql",
        "mkdir",
    ]
    assert result.skipped == []


def test_required_plugin_is_installed_first_with_caption(assembler):
    result = assembler.assemble(_siteContext())
    plugins = _stepsOfKind(result.blueprint, "installPlugin")

    assert [step.pluginZipFile.slug for step in plugins] == ["woocommerce", "woo-addon", "akismet"]
    assert plugins[0].progress.caption == "Installing WooCommerce (Required by: Woo Addon)"
    assert plugins[1].progress.caption == "Installing Woo Addon"


def test_blueprint_header_fields(assembler):
    blueprint = assembler.assemble(_siteContext()).blueprint
    data = blueprint.toDict()
    assert data["landingPage"] == "/wp-admin/"
    assert data["preferredVersions"] == {"php": "8.2", "wp": "6.6"}
    assert data["phpExtensionBundles"] == ["kitchen-sink"]
    assert data["features"] == {"networking": True}
    assert data["login"] is True


def test_custom_settings_are_applied(resolver):
    settings = BlueprintSettings(landingPage="/", phpExtensionBundles=("light",), features={"networking": False}, login=False)
    blueprint = ManifestAssembler(resolver=resolver, settings=settings).assemble(_siteContext()).blueprint
    assert blueprint.landingPage == "/"
    assert blueprint.phpExtensionBundles == ["light"]
    assert blueprint.login is False


def test_exactly_one_site_options_step(assembler):
    blueprint = assembler.assemble(_siteContext(units=[], themeSlug=None, siteOptions={})).blueprint
    assert _stepKinds(blueprint) == ["setSiteOptions"]
    assert blueprint.steps[0].options == {}


# -------- exclusions --------

def test_exclude_all_units(assembler):
    result = assembler.assemble(_siteContext(excludeAllUnits=True))
    assert _stepsOfKind(result.blueprint, "installPlugin") == []
    assert [item.id for item in result.skipped] == ["woo-addon", "akismet", "woocommerce"]
    assert {item.reason for item in result.skipped} == {"excluded"}
    assert result.unavailableIds == []


def test_excluded_requirement_leaves_dependent_in_place(assembler):
    result = assembler.assemble(_siteContext(exclude=frozenset({"woocommerce"})))
    plugins = _stepsOfKind(result.blueprint, "installPlugin")
    assert [step.pluginZipFile.slug for step in plugins] == ["woo-addon", "akismet"]
    assert all("Required by" not in step.progress.caption for step in plugins)


def test_unavailable_plugins_are_skipped(assembler):
    units = [InstallableUnit(id="akismet"), InstallableUnit(id="private-plugin"), InstallableUnit(id="weird-host")]
    result = assembler.assemble(_siteContext(units=units))
    assert [step.pluginZipFile.slug for step in _stepsOfKind(result.blueprint, "installPlugin")] == ["akismet"]
    assert result.unavailableIds == ["private-plugin", "weird-host"]


def test_mirrored_plugin_uses_url_resource(assembler):
    result = assembler.assemble(_siteContext(units=[InstallableUnit(id="gh-plugin")]))
    resource = _stepsOfKind(result.blueprint, "installPlugin")[0].pluginZipFile
    assert isinstance(resource, UrlResource)
    assert resource.url.endswith("?repo=acme/gh-plugin&release=v1.2.0")


def test_theme_excluded(assembler):
    result = assembler.assemble(_siteContext(excludeTheme=True))
    assert _stepsOfKind(result.blueprint, "installTheme") == []
    assert result.skipped[-1].kind == "theme"
    assert result.skipped[-1].reason == "excluded"


def test_theme_missing_from_catalog_is_skipped(assembler):
    result = assembler.assemble(_siteContext(themeSlug="my-custom-theme"))
    assert _stepsOfKind(result.blueprint, "installTheme") == []
    assert result.unavailableIds == ["my-custom-theme"]


def test_theme_step_uses_theme_registry(assembler):
    step = _stepsOfKind(assembler.assemble(_siteContext()).blueprint, "installTheme")[0]
    assert step.themeZipFile.model_dump() == {"resource": "wordpress.org/themes", "slug": "twentytwentyfour"}


# -------- replay --------

def test_no_replay_without_selection(assembler):
    assert _stepsOfKind(assembler.assemble(_siteContext()).blueprint, "runSql") == []


def test_replay_selection(assembler):
    step = _stepsOfKind(assembler.assemble(_siteContext(selectedMutations=(3, 1))).blueprint, "runSql")[0]
    assert step.sql.name == REPLAY_SCRIPT_NAME
    assert step.sql.contents == "INSERT INTO wp_posts VALUES (1);\nUPDATE wp_posts SET a=3;\n"


def test_replay_selection_of_unknown_sequences_adds_nothing(assembler):
    assert _stepsOfKind(assembler.assemble(_siteContext(selectedMutations=(42,))).blueprint, "runSql") == []


def test_replay_without_capture_log(resolver):
    assembler = ManifestAssembler(resolver=resolver)
    assert _stepsOfKind(assembler.assemble(_siteContext(replayAllMutations=True)).blueprint, "runSql") == []


# -------- wire format --------

def test_blueprint_survives_json_round_trip(assembler):
    extra = [
        UnzipStep(zipFile=UrlResource(resource="url", url="https://example.com/uploads.zip"), extractToPath="/wordpress/wp-content/uploads"),
        WriteFileStep(path="/wordpress/wp-content/mu-plugins/hello.php", data="<?php // hello"),
    ]
    blueprint = assembler.assemble(_siteContext(replayAllMutations=True, extraSteps=extra)).blueprint

    restored = Blueprint.fromJson(blueprint.toJson(pretty=True))

    assert restored == blueprint
    assert _stepKinds(restored)[-2:] == ["unzip", "writeFile"]
