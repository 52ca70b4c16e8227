from __future__ import annotations

from dataclasses import asdict
from typing import Dict, Iterable, Sequence

import pandas as pd

from mun_hash.models import Municipio, RegionBatch


def catalog_frame(records: Sequence[Municipio]) -> pd.DataFrame:
    cols = ["tom", "ibge", "nome_tom", "nome_ibge", "uf"]
    return pd.DataFrame([asdict(m) for m in records], columns=cols)


def group_by_region(records: Sequence[Municipio], excluded: Iterable[str] = ("EX",)) -> Dict[str, RegionBatch]:
    """
    Group records by UF.

    Regions come out in case-insensitive alphabetical order, `excluded`
    codes are dropped, and each batch is sorted by preferred name
    (case-insensitive, stable so ties keep catalog order).
    """
    if not records:
        return {}

    df = catalog_frame(records)
    df["_record"] = list(records)
    df["_name_key"] = [m.preferred_name.upper() for m in records]

    skip = {str(e).strip().upper() for e in excluded}
    df = df[~df["uf"].str.upper().isin(skip)]

    out: Dict[str, RegionBatch] = {}
    for uf in sorted(df["uf"].unique(), key=str.upper):
        part = df[df["uf"] == uf].sort_values("_name_key", kind="stable")
        out[str(uf)] = list(part["_record"])
    return out


def region_counts(groups: Dict[str, RegionBatch]) -> Dict[str, int]:
    return {uf: len(batch) for uf, batch in groups.items()}
