# approximate text matching used by the search pipeline
from __future__ import annotations

import math
import re
import sys
from dataclasses import dataclass
from typing import Any, Generic, Iterable, List, Optional, Protocol, Sequence, TypeVar

T = TypeVar("T")

MAX_BITS = 32

DEFAULT_LOCATION = 0
DEFAULT_DISTANCE = 100

_TOKEN = re.compile(r"[^ ]+")


@dataclass(frozen=True)
class WeightedKey:
    """
    Dotted path to a text field of a record, e.g. "category.name".
    Each segment is looked up as a mapping key first, then as an attribute.
    """

    path: str
    weight: float = 1.0


@dataclass(frozen=True)
class Match(Generic[T]):
    record: T
    score: float  # 0 is a perfect match
    index: int  # position in the input collection


class Matcher(Protocol):
    def search(
        self,
        records: Sequence[Any],
        keys: Sequence[WeightedKey],
        query: str,
        threshold: float,
    ) -> List[Match]: ...


def resolve_path(record: Any, path: str) -> Any:
    value = record
    for part in path.split("."):
        if value is None:
            return None
        if isinstance(value, dict):
            value = value.get(part)
        else:
            value = getattr(value, part, None)
    return value


def field_values(record: Any, path: str) -> List[str]:
    """
    Searchable strings of a field. None and blank strings are skipped,
    numbers and booleans are stringified, lists are flattened one level.
    """
    value = resolve_path(record, path)
    items = value if isinstance(value, (list, tuple)) else [value]
    out = []
    for item in items:
        if item is None:
            continue
        if isinstance(item, bool):
            item = "true" if item else "false"
        elif isinstance(item, (int, float)):
            item = str(item)
        elif not isinstance(item, str):
            continue
        if item.strip():
            out.append(item)
    return out


def field_norm(text: str) -> float:
    tokens = max(len(_TOKEN.findall(text)), 1)
    return round(1 / math.sqrt(tokens), 3)


def normalize_weights(keys: Sequence[WeightedKey]) -> List[WeightedKey]:
    total = sum(k.weight for k in keys)
    if total <= 0:
        return list(keys)
    return [WeightedKey(k.path, k.weight / total) for k in keys]


# ---------------------------
# Bitap
# ---------------------------


def _score(
    pattern_len: int,
    errors: int = 0,
    current_location: int = 0,
    expected_location: int = 0,
    distance: int = DEFAULT_DISTANCE,
) -> float:
    accuracy = errors / pattern_len
    proximity = abs(expected_location - current_location)
    if not distance:
        return 1.0 if proximity else accuracy
    return accuracy + proximity / distance


def _alphabet(pattern: str) -> dict:
    mask = {}
    size = len(pattern)
    for i, char in enumerate(pattern):
        mask[char] = mask.get(char, 0) | (1 << (size - i - 1))
    return mask


def bitap_search(
    text: str,
    pattern: str,
    threshold: float,
    location: int = DEFAULT_LOCATION,
    distance: int = DEFAULT_DISTANCE,
) -> tuple[bool, float]:
    """
    Fuzzy-find pattern (at most MAX_BITS chars) in text.
    Returns (is_match, score) where score combines error ratio and
    distance from the expected location.
    """
    pattern_len = len(pattern)
    text_len = len(text)
    alphabet = _alphabet(pattern)
    expected = max(0, min(location, text_len))
    current_threshold = threshold
    best_location = expected

    # exact occurrences tighten the threshold before the fuzzy pass
    index = text.find(pattern, best_location)
    while index > -1:
        score = _score(pattern_len, 0, index, expected, distance)
        current_threshold = min(score, current_threshold)
        best_location = index + pattern_len
        index = text.find(pattern, best_location)

    best_location = -1
    last_bits: List[int] = []
    final_score = 1.0
    bin_max = pattern_len + text_len
    mask = 1 << (pattern_len - 1)

    for i in range(pattern_len):
        # how far from the expected location can we stray at this error level
        bin_min = 0
        bin_mid = bin_max
        while bin_min < bin_mid:
            score = _score(pattern_len, i, expected + bin_mid, expected, distance)
            if score <= current_threshold:
                bin_min = bin_mid
            else:
                bin_max = bin_mid
            bin_mid = (bin_max - bin_min) // 2 + bin_min
        bin_max = bin_mid

        start = max(1, expected - bin_mid + 1)
        finish = min(expected + bin_mid, text_len) + pattern_len

        bits = [0] * (finish + 2)
        bits[finish + 1] = (1 << i) - 1

        j = finish
        while j >= start:
            current_location = j - 1
            char_match = (
                alphabet.get(text[current_location], 0)
                if current_location < text_len
                else 0
            )
            bits[j] = ((bits[j + 1] << 1) | 1) & char_match
            if i:
                prev_next = last_bits[j + 1] if j + 1 < len(last_bits) else 0
                prev_here = last_bits[j] if j < len(last_bits) else 0
                bits[j] |= ((prev_next | prev_here) << 1) | 1 | prev_next

            if bits[j] & mask:
                final_score = _score(
                    pattern_len, i, current_location, expected, distance
                )
                if final_score <= current_threshold:
                    current_threshold = final_score
                    best_location = current_location
                    if best_location <= expected:
                        break
                    start = max(1, 2 * expected - best_location)
            j -= 1

        if _score(pattern_len, i + 1, expected, expected, distance) > current_threshold:
            break
        last_bits = bits

    return best_location >= 0, max(0.001, final_score)


def _chunks(pattern: str) -> List[tuple[str, int]]:
    size = len(pattern)
    if size <= MAX_BITS:
        return [(pattern, 0)]
    remainder = size % MAX_BITS
    end = size - remainder
    chunks = [(pattern[i : i + MAX_BITS], i) for i in range(0, end, MAX_BITS)]
    if remainder:
        start = size - MAX_BITS
        chunks.append((pattern[start:], start))
    return chunks


def match_text(
    text: str,
    query: str,
    threshold: float,
    location: int = DEFAULT_LOCATION,
    distance: int = DEFAULT_DISTANCE,
) -> tuple[bool, float]:
    """Case-insensitive match of query against one field value."""
    text = text.lower()
    pattern = query.lower()
    if pattern == text:
        return True, 0.0

    matched = False
    total = 0.0
    chunks = _chunks(pattern)
    for chunk, offset in chunks:
        is_match, score = bitap_search(
            text, chunk, threshold, location + offset, distance
        )
        matched = matched or is_match
        total += score
    return matched, (total / len(chunks) if matched else 1.0)


class BitapMatcher:
    """
    Default matcher. A field matches when its score is within the threshold;
    a record's score multiplies its matching fields' scores, each raised to
    weight * field-length norm. Best (lowest) score first.
    """

    def __init__(
        self, location: int = DEFAULT_LOCATION, distance: int = DEFAULT_DISTANCE
    ) -> None:
        self.location = location
        self.distance = distance

    def score_record(
        self, record: Any, keys: Sequence[WeightedKey], query: str, threshold: float
    ) -> Optional[float]:
        total = 1.0
        matched = False
        for key in keys:
            for value in field_values(record, key.path):
                is_match, score = match_text(
                    value, query, threshold, self.location, self.distance
                )
                if not is_match:
                    continue
                matched = True
                base = sys.float_info.epsilon if score == 0 and key.weight else score
                total *= base ** ((key.weight or 1) * field_norm(value))
        return total if matched else None

    def search(
        self,
        records: Sequence[Any],
        keys: Sequence[WeightedKey],
        query: str,
        threshold: float,
    ) -> List[Match]:
        keys = normalize_weights(keys)
        matches = []
        for idx, record in enumerate(records):
            score = self.score_record(record, keys, query, threshold)
            if score is not None:
                matches.append(Match(record, score, idx))
        matches.sort(key=lambda m: (m.score, m.index))
        return matches


def ranked(matches: Iterable[Match]) -> List[Any]:
    return [m.record for m in matches]
