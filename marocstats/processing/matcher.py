"""Region name reconciliation.

Free-text names coming from boundary files or user queries are mapped to the
canonical region keys used by the statistics tables. Resolution tries, in
order: exact equality, the synonym table, normalized containment against the
available regions, normalized containment against the synthetic reference
keys. The first step that produces a match wins.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Sequence

from marocstats.processing.normalizer import compact, normalize
from marocstats.reference import REGION_SYNONYMS

logger = logging.getLogger(__name__)


class RegionMatcher:
    """Resolve free-text region names against a set of canonical regions.

    ``synonyms`` is walked in insertion order and the first canonical entry
    with a matching spelling wins, so an ambiguous substring can resolve to
    an earlier entry rather than the most specific one.
    """

    def __init__(
        self,
        synonyms: Mapping[str, Sequence[str]] | None = None,
        fallback_regions: Iterable[str] = (),
    ):
        table = REGION_SYNONYMS if synonyms is None else synonyms
        self._synonyms = [
            (canonical, [normalize(s) for s in spellings])
            for canonical, spellings in table.items()
        ]
        self._fallback = list(fallback_regions)

    def resolve(self, free_text, available_regions: Iterable[str]) -> str | None:
        regions = list(available_regions)
        wanted = normalize(free_text)
        if not wanted:
            return None

        if free_text in regions:
            return free_text

        for canonical, spellings in self._synonyms:
            if canonical not in regions:
                continue
            for spelling in spellings:
                if spelling == wanted or spelling in wanted or wanted in spelling:
                    return canonical

        key = compact(free_text)
        match = _containment_match(key, regions) or _containment_match(key, self._fallback)
        if match is None:
            logger.debug("No region matches %r", free_text)
        return match


def _containment_match(key: str, candidates: Iterable[str]) -> str | None:
    for candidate in candidates:
        other = compact(candidate)
        if other and (key in other or other in key):
            return candidate
    return None


def resolve(free_text, available_regions: Iterable[str], fallback_regions: Iterable[str] = ()) -> str | None:
    """Resolve with the static synonym table."""
    return RegionMatcher(fallback_regions=fallback_regions).resolve(free_text, available_regions)
