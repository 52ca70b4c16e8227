from __future__ import annotations

import pytest

from mun_hash.config import HashConfig
from mun_hash.models import Municipio

FAST_ITERATIONS = 1000


@pytest.fixture
def three_records() -> list[Municipio]:
    return [
        Municipio.build("7107", "3550308", "SAO PAULO", "São Paulo", "SP"),
        Municipio.build("6001", "3304557", "RIO DE JANEIRO", "Rio de Janeiro", "RJ"),
        Municipio.build("9701", "5300108", "BRASILIA", "Brasília", "DF"),
    ]


@pytest.fixture
def catalog_records() -> list[Municipio]:
    return [
        Municipio.build("7107", "3550308", "SAO PAULO", "São Paulo", "SP"),
        Municipio.build("6291", "3509502", "CAMPINAS", "Campinas", "sp"),
        Municipio.build("6213", "3501608", "AMERICANA", "Americana", "SP"),
        Municipio.build("6001", "3304557", "RIO DE JANEIRO", "Rio de Janeiro", "RJ"),
        Municipio.build("5869", "3303302", "NITEROI", "Niterói", "RJ"),
        Municipio.build("9701", "5300108", "BRASILIA", "Brasília", "DF"),
        Municipio.build("9999", "9999999", "EXTERIOR", "Exterior", "EX"),
    ]


@pytest.fixture
def fast_config(tmp_path) -> HashConfig:
    return HashConfig(
        iterations=FAST_ITERATIONS,
        hash_bytes=32,
        out_dir=str(tmp_path / "out"),
        workers=4,
    ).validate()
