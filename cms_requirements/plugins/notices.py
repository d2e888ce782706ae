"""
Requirement Notices

Wording for each failure category, translation lookup keyed by the plugin's
text domain, and escaping for hosts that render notices as HTML.
"""

from __future__ import annotations

import gettext
from functools import lru_cache

import bleach

from cms_requirements.config import settings

# ── Message templates ─────────────────────────────────────────────────────────

PYTHON_VERSION_NOTICE = (
    "The “{plugin}” plugin cannot run on Python versions older than {version}. "
    "Please contact your host and ask them to upgrade."
)
HOST_VERSION_NOTICE = (
    "The “{plugin}” plugin cannot run on {host} versions older than {version}. Please update {host}."
)
PLUGIN_NOTICE = (
    "The “{plugin}” plugin cannot run without {name} active. Please install and activate {name} plugin."
)
MODULE_NOTICE = (
    "The “{plugin}” plugin cannot run without {name} Python module installed. "
    "Please contact your host and ask them to install {name}."
)
SETTING_NOTICE = (
    "The “{plugin}” plugin cannot run without {setting} setting set to {value}. "
    "Please contact your host and ask them to set {setting}."
)

NOTICE_HTML = '<div class="error"><p>{message}</p></div>'


# ── Translation ───────────────────────────────────────────────────────────────


@lru_cache(maxsize=32)
def _translations(text_domain: str, locale_dir: str | None) -> gettext.NullTranslations:
    return gettext.translation(text_domain, localedir=locale_dir, fallback=True)


def translate(message: str, text_domain: str) -> str:
    """Look ``message`` up in the catalog for ``text_domain``, falling back to the source text."""
    return _translations(text_domain, settings.locale_dir).gettext(message)


# ── Rendering ─────────────────────────────────────────────────────────────────


def escape_html(text: str) -> str:
    """Escape all markup in ``text``."""
    return bleach.clean(str(text), tags=[], strip=False)


def render_notice_html(message: str) -> str:
    """Wrap a plain notice in the host's error notice markup."""
    return NOTICE_HTML.format(message=escape_html(message))
