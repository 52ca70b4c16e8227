from __future__ import annotations

import random
import unicodedata
from pathlib import Path
from typing import List, Optional

import pandas as pd
from faker import Faker

from mun_hash.models import Municipio

CATALOG_HEADER = ["TOM", "IBGE", "NomeTOM", "NomeIBGE", "UF"]


def _tom_name(name: str) -> str:
    # TOM names are uppercase ASCII
    folded = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    return folded.upper()


def generate_catalog(rows: int, seed: Optional[int] = None, exterior_rate: float = 0.02) -> List[Municipio]:
    """
    Synthetic municipality catalog for offline runs.

    IBGE codes are unique 7-digit strings, TOM codes 4-digit strings. About
    `exterior_rate` of the rows land in UF "EX" so the exclusion path gets
    exercised. Without a seed every call gives a different catalog.
    """
    r = random.Random(seed)
    fake = Faker("pt_BR")
    fake.seed_instance(r.randint(1, 2_000_000_000))

    used_ibge = set()
    out: List[Municipio] = []
    for i in range(rows):
        ibge = str(r.randint(1_100_000, 5_399_999))
        while ibge in used_ibge:
            ibge = str(r.randint(1_100_000, 5_399_999))
        used_ibge.add(ibge)

        city = fake.city()
        uf = "EX" if r.random() < exterior_rate else fake.estado_sigla()
        out.append(Municipio.build(f"{r.randint(1, 9999):04d}", ibge, _tom_name(city), city, uf))
    return out


def write_catalog(records: List[Municipio], path: Path) -> Path:
    df = pd.DataFrame(
        [[m.tom, m.ibge, m.nome_tom, m.nome_ibge, m.uf] for m in records],
        columns=CATALOG_HEADER,
    )
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, sep=";", index=False, encoding="utf-8")
    return path
