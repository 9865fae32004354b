import pytest

from sim.catalogue import build_catalogue
from sim.state import WeaponRecord


def make_record(
    name: str = "W",
    price: int = 100,
    damage: int = 10,
    fire_rate: float = 1.0,
    magazine_size: int = 0,
    falloff: int = 1,
    accurate_range: float = 0.0,
    recoil: float = 0.0,
) -> WeaponRecord:
    """Record whose balance score equals its damage with the defaults."""
    return WeaponRecord(
        name=name,
        price=price,
        damage=damage,
        fire_rate=fire_rate,
        magazine_size=magazine_size,
        falloff=falloff,
        accurate_range=accurate_range,
        recoil=recoil,
    )


def make_catalogue(count: int = 34, overrides: dict = None):
    """
    Catalogue of `count` weapons: index i costs 100 + 10*i and scores i + 1.

    overrides maps index -> make_record kwargs.
    """
    overrides = overrides or {}
    records = []
    for i in range(count):
        kwargs = {"name": f"W{i:02d}", "price": 100 + 10 * i, "damage": i + 1}
        kwargs.update(overrides.get(i, {}))
        records.append(make_record(**kwargs))
    return build_catalogue(records)


def record_line(record: WeaponRecord) -> str:
    return (
        f"{record.name} {record.price} {record.damage} {record.fire_rate} "
        f"{record.magazine_size} {record.falloff} {record.accurate_range} {record.recoil}"
    )


def scripted(mapping):
    """Opponent function returning a fixed catalogue index per round."""
    def pick(tier, catalogue, rng):
        return mapping[tier.round_number]
    return pick


def scripted_input(values):
    """input() replacement that replays values in order."""
    it = iter(values)

    def fake_input(prompt=""):
        return next(it)
    return fake_input


@pytest.fixture
def simple_catalogue():
    return make_catalogue()


@pytest.fixture
def write_catalogue(tmp_path):
    """Write lines to a catalogue file and return its path."""
    def _write(lines, name="weapons.txt"):
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return str(path)
    return _write
