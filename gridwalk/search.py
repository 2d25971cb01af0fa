"""Fuzzy type-to-jump over the names of the current listing.

Substring hits win over scattered subsequence hits; among subsequence hits
contiguous runs and word-boundary starts score higher.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

SEARCH_MODE_TIMED = "timed"
SEARCH_MODE_MODAL = "modal"
SEARCH_MODES = (SEARCH_MODE_TIMED, SEARCH_MODE_MODAL)
_BOUNDARY_CHARS = "/_- ."


@dataclass(frozen=True)
class FuzzyMatch:
    index: int
    positions: tuple[int, ...]
    score: int


def fuzzy_positions(query: str, candidate: str) -> tuple[int, tuple[int, ...]] | None:
    """Score ``query`` as a case-insensitive subsequence of ``candidate``."""
    if not query:
        return 0, ()
    query_folded = query.casefold()
    candidate_folded = candidate.casefold()

    score = 0
    prev_idx = -1
    run = 0
    positions: list[int] = []
    for needle in query_folded:
        idx = candidate_folded.find(needle, prev_idx + 1)
        if idx < 0:
            return None
        if idx == prev_idx + 1:
            run += 1
            score += 20 + min(16, run * 4)
        else:
            gap = idx - prev_idx - 1
            run = 0
            score -= min(40, gap * 2)
        if idx == 0 or candidate_folded[idx - 1] in _BOUNDARY_CHARS:
            score += 35
        positions.append(idx)
        prev_idx = idx

    score -= len(candidate_folded) // 5
    return score, tuple(positions)


def fuzzy_find(query: str, names: Sequence[str]) -> FuzzyMatch | None:
    """Return the best match for ``query`` among ``names``, or ``None``."""
    if not query or not names:
        return None
    query_folded = query.casefold()

    best_substring: tuple[int, int, int] | None = None
    for idx, name in enumerate(names):
        found = name.casefold().find(query_folded)
        if found < 0:
            continue
        key = (found, len(name), idx)
        if best_substring is None or key < best_substring:
            best_substring = key
    if best_substring is not None:
        found, length, idx = best_substring
        positions = tuple(range(found, found + len(query)))
        return FuzzyMatch(index=idx, positions=positions, score=10_000 - found * 50 - length)

    best: FuzzyMatch | None = None
    for idx, name in enumerate(names):
        scored = fuzzy_positions(query, name)
        if scored is None:
            continue
        score, positions = scored
        if best is None or score > best.score or (score == best.score and len(name) < len(names[best.index])):
            best = FuzzyMatch(index=idx, positions=positions, score=score)
    return best


@dataclass(frozen=True)
class SearchPolicy:
    """How type-to-search ends: after an idle ``timeout`` or only on request."""

    mode: str = SEARCH_MODE_TIMED
    timeout: float = 1.0

    @property
    def expires(self) -> bool:
        return self.mode == SEARCH_MODE_TIMED


class TypeAheadSearch:
    """Query accumulation for type-to-search.

    Every keystroke bumps ``search_id``; delayed expiry callbacks carry the id
    they were scheduled with and are ignored once it is stale.
    """

    def __init__(self, policy: SearchPolicy | None = None) -> None:
        self.policy = policy or SearchPolicy()
        self.active = False
        self.query = ""
        self.search_id = 0
        self.last_key_at = 0.0
        self.matched_positions: tuple[int, ...] = ()

    def open(self, now: float) -> None:
        self.active = True
        self.query = ""
        self.matched_positions = ()
        self.last_key_at = now
        self.search_id += 1

    def close(self) -> None:
        self.active = False
        self.query = ""
        self.matched_positions = ()
        self.search_id += 1

    def type(self, text: str, now: float) -> str:
        """Feed typed text; timed searches restart after an idle gap."""
        if self.policy.expires and self.query and now - self.last_key_at >= self.policy.timeout:
            self.query = text
        else:
            self.query += text
        self.last_key_at = now
        self.search_id += 1
        return self.query

    def backspace(self, now: float) -> str:
        self.query = self.query[:-1]
        self.last_key_at = now
        self.search_id += 1
        return self.query

    def expire(self, search_id: int) -> bool:
        """Close the search if ``search_id`` is still current; report whether it did."""
        if not self.active or search_id != self.search_id:
            return False
        self.close()
        return True
