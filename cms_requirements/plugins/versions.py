"""Version comparison for requirement checks."""

from __future__ import annotations

import logging

from packaging.version import InvalidVersion, Version

logger = logging.getLogger(__name__)


def is_version_at_least(current: str, minimum: str) -> bool:
    """
    Return True if ``current`` >= ``minimum`` under PEP 440 ordering.

    Segments compare numerically ("5.10" > "5.9") and a pre-release sorts below
    its release ("8.0.0rc1" < "8.0.0"). A version that cannot be parsed fails
    the comparison instead of raising.
    """
    try:
        return Version(str(current)) >= Version(str(minimum))
    except InvalidVersion as exc:
        logger.warning("Cannot compare versions %r and %r: %s", current, minimum, exc)
        return False
