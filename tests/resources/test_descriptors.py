# tests/resources/test_descriptors.py
from __future__ import annotations

import pytest

from recorder.resources.descriptors import (
    UNAVAILABLE,
    descriptorFromCache,
    mirroredArchiveResource,
    pluginResource,
    themeResource,
)

PROXY = "https://github-proxy.com/proxy/"


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://github.com/acme/tool/archive/refs/heads/main.zip", f"{PROXY}?repo=acme/tool&release=main"),
        ("https://github.com/acme/tool.js/archive/refs/tags/v2.0.1.zip", f"{PROXY}?repo=acme/tool.js&release=v2.0.1"),
    ],
)
def test_github_archives_are_mirrored(url, expected):
    assert mirroredArchiveResource(url, proxyEndpoint=PROXY).url == expected


@pytest.mark.parametrize(
    "url",
    [
        "https://github.com/acme/tool/archive/main.zip",
        "https://github.com/acme/tool/releases/download/v1/tool.zip",
        "http://github.com/acme/tool/archive/refs/heads/main.zip",
        "https://github.com/acme/tool/archive/refs/heads/main.zip?x=1",
        "https://github.com/acme/tool&evil=1/archive/refs/heads/main.zip",
        "https://gitlab.com/acme/tool/archive/refs/heads/main.zip",
        "",
    ],
)
def test_other_urls_are_not_mirrored(url):
    assert mirroredArchiveResource(url, proxyEndpoint=PROXY) is None


def test_registry_wire_shape():
    assert pluginResource("akismet").model_dump() == {"resource": "wordpress.org/plugins", "slug": "akismet"}
    assert themeResource("twentytwentyfour").model_dump() == {"resource": "wordpress.org/themes", "slug": "twentytwentyfour"}


def test_descriptor_from_cache():
    assert descriptorFromCache(None) is None
    assert descriptorFromCache({"resource": "unavailable"}) == UNAVAILABLE
    assert descriptorFromCache({"resource": "url", "url": f"{PROXY}?repo=a/b&release=c"}).kind == "mirroredUrl"
    assert descriptorFromCache({"resource": "wordpress.org/plugins"}) is None
    assert descriptorFromCache("garbage") is None
