"""
Weapon Catalogue Loader.

Reads whitespace-delimited weapon records, one per line:

    name price damage fireRate magazineSize falloff accurateRange recoil

and returns an immutable Catalogue with balance scores computed once.
"""

import os
from typing import Dict, Iterable, List, Optional

from sim.errors import LoadError, ScoreError
from sim.mechanics import balance_score
from sim.state import Catalogue, WeaponRecord


CATALOGUE_CAPACITY = 34

# (field name, parser) in file order
RECORD_FIELDS = [
    ("name", str),
    ("price", int),
    ("damage", int),
    ("fire_rate", float),
    ("magazine_size", int),
    ("falloff", int),
    ("accurate_range", float),
    ("recoil", float),
]


def default_catalogue_path() -> str:
    """data/weapons.txt at the project root."""
    base_path = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    return os.path.join(base_path, "data", "weapons.txt")


def parse_record(line: str, line_number: int = 0) -> WeaponRecord:
    """
    Parse one record line.

    Raises:
        LoadError: wrong field count or a field of the wrong type
    """
    parts = line.split()
    if len(parts) != len(RECORD_FIELDS):
        raise LoadError(
            f"line {line_number}: expected {len(RECORD_FIELDS)} fields, got {len(parts)}: {line.strip()!r}"
        )

    values = {}
    for (field_name, parser), raw in zip(RECORD_FIELDS, parts):
        try:
            values[field_name] = parser(raw)
        except ValueError:
            raise LoadError(
                f"line {line_number}: field '{field_name}' expects {parser.__name__}, got {raw!r}"
            ) from None

    return WeaponRecord(**values)


def parse_lines(
    lines: Iterable[str],
    capacity: int = CATALOGUE_CAPACITY
) -> List[WeaponRecord]:
    """Parse records from lines, stopping once `capacity` records are read."""
    records = []
    for line_number, line in enumerate(lines, start=1):
        if len(records) >= capacity:
            break
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        records.append(parse_record(stripped, line_number))
    return records


def build_catalogue(
    records: List[WeaponRecord],
    capacity: int = CATALOGUE_CAPACITY,
    weights: Optional[Dict[str, float]] = None,
    source: str = None
) -> Catalogue:
    """
    Score records and wrap them in a Catalogue.

    Raises:
        LoadError: a record has an undefined balance score
    """
    try:
        scores = tuple(balance_score(r, weights) for r in records)
    except ScoreError as e:
        raise LoadError(str(e)) from e

    return Catalogue(
        records=tuple(records),
        scores=scores,
        capacity=capacity,
        source=source,
    )


def load_catalogue(
    path: str = None,
    capacity: int = CATALOGUE_CAPACITY,
    weights: Optional[Dict[str, float]] = None
) -> Catalogue:
    """
    Load a catalogue file.

    Args:
        path: Catalogue file; defaults to data/weapons.txt
        capacity: Maximum records read; later lines are ignored
        weights: Optional balance score weights

    Returns:
        Catalogue with scores cached

    Raises:
        LoadError: source missing/unreadable or a record is malformed
    """
    if path is None:
        path = default_catalogue_path()

    try:
        with open(path, "r", encoding="utf-8") as f:
            records = parse_lines(f, capacity)
    except (OSError, UnicodeDecodeError) as e:
        raise LoadError(f"cannot read catalogue {path}: {e}") from e
    except LoadError as e:
        raise LoadError(f"{path}: {e}") from e

    return build_catalogue(records, capacity=capacity, weights=weights, source=path)
