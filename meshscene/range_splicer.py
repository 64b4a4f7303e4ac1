"""Merging of byte ranges into a sorted list of disjoint ranges."""

from __future__ import annotations

from enum import Enum, auto


class IndexResult(Enum):
    """How a candidate range relates to an existing range."""

    STRICTLY_GREATER = auto()
    STRICTLY_LESS = auto()
    FULLY_CONTAINED = auto()
    FULLY_COVER = auto()
    LEFT_OVERLAP = auto()
    RIGHT_OVERLAP = auto()
    EXACTLY_EQUAL = auto()


def get_index_result(current_range: range, candidate_range: range) -> IndexResult:
    """Classify ``candidate_range`` against ``current_range``.

    Ranges that merely touch (one past the end) count as overlapping.
    Raises ValueError for a relation that cannot be classified.
    """
    cur_start, cur_end = current_range.start, current_range.stop
    start, end = candidate_range.start, candidate_range.stop
    if start == cur_start:
        return IndexResult.EXACTLY_EQUAL
    if start > cur_end + 1:
        return IndexResult.STRICTLY_GREATER
    if end + 1 < cur_start:
        return IndexResult.STRICTLY_LESS
    if start == cur_end + 1:
        return IndexResult.RIGHT_OVERLAP
    if end + 1 == cur_start:
        return IndexResult.LEFT_OVERLAP
    if start > cur_start and end > cur_end:
        return IndexResult.RIGHT_OVERLAP
    if start < cur_start and end < cur_end:
        return IndexResult.LEFT_OVERLAP
    if start > cur_start and end < cur_end:
        return IndexResult.FULLY_CONTAINED
    if start < cur_start and end > cur_end:
        return IndexResult.FULLY_COVER
    raise ValueError(
        f"cannot classify range {candidate_range!r} against {current_range!r}"
    )


def _splice(ranges: list[range], candidate: range, start_idx: int, end_idx: int) -> None:
    left = min(candidate.start, ranges[start_idx].start)
    right = max(candidate.stop, ranges[end_idx - 1].stop)
    ranges[start_idx:end_idx] = [range(left, right)]


def define_index_ranges(ranges: list[range], candidate_range: range) -> None:
    """Merge ``candidate_range`` into the sorted list ``ranges`` in place."""
    candidate = range(candidate_range.start, candidate_range.stop)
    if not ranges:
        ranges.append(candidate)
        return

    snapshot = list(ranges)
    total = len(snapshot)
    current_idx = 0
    position = 0
    while position < total:
        current = snapshot[position]
        position += 1
        result = get_index_result(current, candidate)

        if result is IndexResult.EXACTLY_EQUAL:
            return
        if result is IndexResult.STRICTLY_GREATER:
            if position == total:
                ranges.append(candidate)
                return
            current_idx += 1
            continue
        if result is IndexResult.STRICTLY_LESS:
            ranges.insert(current_idx, candidate)
            return
        if result is IndexResult.LEFT_OVERLAP:
            _splice(ranges, candidate, current_idx, current_idx + 1)
            return
        if result in (IndexResult.FULLY_COVER, IndexResult.RIGHT_OVERLAP):
            splice_offset = 0
            while True:
                splice_offset += 1
                if position == total:
                    _splice(ranges, candidate, current_idx, current_idx + splice_offset)
                    return
                following = snapshot[position]
                position += 1
                following_result = get_index_result(following, candidate)
                if following_result is IndexResult.FULLY_COVER:
                    continue
                if following_result is IndexResult.LEFT_OVERLAP:
                    _splice(ranges, candidate, current_idx, current_idx + splice_offset + 1)
                    return
                if following_result is IndexResult.STRICTLY_LESS:
                    _splice(ranges, candidate, current_idx, current_idx + splice_offset)
                    return
                raise ValueError(
                    f"unexpected range {following!r} while merging {candidate!r}"
                )
        # FULLY_CONTAINED: nothing to add for this range
        current_idx += 1