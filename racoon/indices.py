"""
Country index (lookup table for the country picker)
===================================================

The dashboard offers a country picker. With ~200 countries a linear scan
would do, but keeping the names sorted lets prefix lookups use binary search
(`bisect`) and gives a stable, alphabetical listing for free.

- `names_sorted` is the alphabetical country list.
- `latest[name]` is the last cumulative value of that country's series.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Mapping
from bisect import bisect_left

from .models import TimeSeries


@dataclass
class CountryIndex:
    """Container of precomputed lookups over one series map."""
    names_sorted: List[str]
    latest: Dict[str, int]
    # parallel to names_sorted, lower-cased and sorted for prefix search
    _folded: List[str]
    _by_folded: List[str]

    def with_prefix(self, prefix: str) -> List[str]:
        """Return country names starting with `prefix` (case-insensitive), sorted."""
        p = prefix.lower()
        if not p:
            return self.names_sorted[:]
        lo = bisect_left(self._folded, p)
        out: List[str] = []
        for i in range(lo, len(self._folded)):
            if not self._folded[i].startswith(p):
                break
            out.append(self._by_folded[i])
        out.sort()
        return out

    def __contains__(self, name: object) -> bool:
        return name in self.latest

    def __len__(self) -> int:
        return len(self.names_sorted)


def build_country_index(series_map: Mapping[str, TimeSeries]) -> CountryIndex:
    """Build the index from an aggregated series map."""
    names_sorted = sorted(series_map.keys())
    latest = {name: (series[-1].value if series else 0) for name, series in series_map.items()}
    folded_pairs = sorted((name.lower(), name) for name in names_sorted)
    return CountryIndex(
        names_sorted=names_sorted,
        latest=latest,
        _folded=[f for f, _ in folded_pairs],
        _by_folded=[n for _, n in folded_pairs],
    )
