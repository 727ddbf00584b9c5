"""
Billboard size strings: parsing, orientation-insensitive matching and the
canonical spellings used by the static price catalogue.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple

SIZE_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*[xX×]\s*(\d+(?:\.\d+)?)")

# Keep tuple structure to preserve catalogue order
CATALOGUE_SIZES: Tuple[str, ...] = ("4x12", "6x18", "8x24", "3x9", "2x6")
DEFAULT_SIZE = "4x12"

_SEPARATORS = ("x", "*", "×", "-", " ")


def _build_canonical_map() -> Dict[str, str]:
    mapping: Dict[str, str] = {}
    for size in CATALOGUE_SIZES:
        width, height = size.split("x")
        for sep in ("x", "*", "×"):
            mapping[f"{width}{sep}{height}"] = size
            mapping[f"{height}{sep}{width}"] = size
    return mapping


_CANONICAL_SIZES = _build_canonical_map()


def parse_size(text: object) -> Optional[Tuple[float, float]]:
    """Return ``(width, height)`` parsed from ``"W x H"`` or ``None``."""

    if text is None:
        return None
    match = SIZE_PATTERN.search(str(text))
    if not match:
        return None
    return float(match.group(1)), float(match.group(2))


def size_area(text: object) -> float:
    """Face area in square metres; malformed sizes have no area."""

    dims = parse_size(text)
    if dims is None:
        return 0.0
    return dims[0] * dims[1]


def dimensions_match(a: Tuple[float, float], b: Tuple[float, float]) -> Optional[str]:
    """Return ``"exact"`` or ``"flipped"`` when ``a`` and ``b`` describe the same face."""

    if a == b:
        return "exact"
    if a == (b[1], b[0]):
        return "flipped"
    return None


def sizes_match(a: object, b: object) -> bool:
    """True when two size strings are equal or are the same face turned 90 degrees."""

    if a is None or b is None:
        return False
    if str(a).strip() == str(b).strip():
        return True
    dims_a = parse_size(a)
    dims_b = parse_size(b)
    if dims_a is None or dims_b is None:
        return False
    return dimensions_match(dims_a, dims_b) is not None


def canonical_size(text: object) -> str:
    """
    Normalize a size into the spelling used by the static catalogue.

    Accepts ``"4x12"``, ``"12*4"``, ``"4×12"`` and so on.  Sizes outside the
    catalogue are returned unchanged; an empty size maps to the default face.
    """

    if text is None:
        return DEFAULT_SIZE
    raw = str(text)
    candidate = raw.strip().lower()
    if not candidate:
        return DEFAULT_SIZE
    return _CANONICAL_SIZES.get(candidate, raw)


def size_variants(text: object) -> List[str]:
    """Every spelling of ``text`` that a sizes table row might use."""

    if text is None:
        return []
    clean = str(text).strip().lower()
    if not clean:
        return [clean]
    dimensions: List[str] = []
    for sep in _SEPARATORS:
        if sep in clean:
            dimensions = [part.strip() for part in clean.split(sep) if part.strip()]
            break
    if len(dimensions) != 2:
        return [clean]
    a, b = dimensions
    return [f"{a}x{b}", f"{b}x{a}", f"{a}*{b}", f"{b}*{a}", f"{a}-{b}", f"{b}-{a}", clean]


__all__ = [
    "CATALOGUE_SIZES",
    "DEFAULT_SIZE",
    "SIZE_PATTERN",
    "canonical_size",
    "dimensions_match",
    "parse_size",
    "size_area",
    "size_variants",
    "sizes_match",
]
