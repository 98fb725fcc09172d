# recorder/blueprint/presentation.py
from __future__ import annotations
import html
import posixpath
from collections.abc import Sequence

from recorder.blueprint.models import Blueprint, MkdirStep, WriteFileStep

__all__ = ["PLAYGROUND_URL", "NOTICE_PLUGIN_PATH", "buildSkippedNoticeSteps", "playgroundUrl"]

PLAYGROUND_URL = "https://playground.wordpress.net/"
NOTICE_PLUGIN_PATH = "wordpress/wp-content/mu-plugins/blueprint-recorder-message.php"



def buildSkippedNoticeSteps(skippedIds: Sequence[str], *, path: str = NOTICE_PLUGIN_PATH) -> list[MkdirStep | WriteFileStep]:
    """
    mkdir + writeFile steps for a must-use plugin that shows an admin notice
    listing what could not be installed. Empty list when nothing was skipped.
    """
    if not skippedIds:
        return []

    items = "".join(f"<li>{html.escape(slug, quote=True)}</li>" for slug in skippedIds)
    markup = (
        '<div class="notice notice-error is-dismissible" id="blueprint-recorder-message">'
        "<p><strong>The following plugins were not loaded since they are not available "
        "in the WordPress.org plugin directory:</strong></p>"
        f"<ul>{items}</ul></div>"
    )
    # html.escape turns ' into &#x27;, so the markup is safe inside a single-quoted PHP string
    data = "<?php add_action('admin_notices', function() { echo '" + markup + "'; });"

    return [
        MkdirStep(path=posixpath.dirname(path)),
        WriteFileStep(path=path, data=data),
    ]



def playgroundUrl(blueprint: Blueprint, *, base: str = PLAYGROUND_URL) -> str:
    """Launch link with the blueprint in the URL fragment."""
    return f"{base}#" + blueprint.toJson().replace("%", "%25")
