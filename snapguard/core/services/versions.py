"""
Version classification — is a version string a SNAPSHOT?

Follows Maven's own convention: a version is a snapshot when it ends in
the ``SNAPSHOT`` qualifier (any case) or is a deployed, timestamped
snapshot such as ``1.0-20240105.134501-3``.
"""

from __future__ import annotations

import re

SNAPSHOT_QUALIFIER = "SNAPSHOT"

# <base>-yyyyMMdd.HHmmss-<buildNumber>
_TIMESTAMPED_SNAPSHOT = re.compile(r"^(.*)-(\d{8}\.\d{6})-(\d+)$")


def is_unstable(version: str | None) -> bool:
    """Whether ``version`` denotes a mutable (snapshot) artifact.

    Never raises: ``None``, empty, non-string and malformed values are
    treated as stable.
    """
    if not isinstance(version, str):
        return False
    if version.upper().endswith(SNAPSHOT_QUALIFIER):
        return True
    return _TIMESTAMPED_SNAPSHOT.match(version) is not None
