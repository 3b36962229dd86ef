from __future__ import annotations

from collections.abc import Mapping
from typing import Final

RESERVED_TAG: Final = "__name__"
_FORBIDDEN: Final = frozenset("{},=")


def merge_tags_with_app_name(application_name: str, tags: Mapping[str, str]) -> str:
    """
    Build the series name Pyroscope files the profile under, e.g.
    ``my.app.cpu{env=staging,region=us-west-1}``. Pairs are sorted as whole
    ``key=value`` strings, so the result doesn't depend on mapping order.
    """
    pairs = sorted(f"{k}={v}" for k, v in tags.items() if k != RESERVED_TAG)
    if not pairs:
        return application_name
    return f"{application_name}{{{','.join(pairs)}}}"


def validate_tags(tags: Mapping[str, str]) -> dict[str, str]:
    out: dict[str, str] = {}
    for k, v in tags.items():
        k, v = str(k), str(v)
        if not k:
            raise ValueError("tag key must not be empty")
        bad = _FORBIDDEN.intersection(k + v)
        if bad:
            raise ValueError(f"tag {k}={v!r} contains reserved characters: {''.join(sorted(bad))}")
        out[k] = v
    return out
