from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List

from mun_hash.errors import ValidationError

# Table header and JSON keys, in emission order.
TABLE_HEADER = ["TOM", "IBGE", "NomeTOM", "NomeIBGE", "UF", "Hash"]
JSON_KEYS = ["Tom", "Ibge", "NomeTom", "NomeIbge", "Uf", "Hash"]

# UF codes become part of output file names
REGION_PATTERN = re.compile(r"[A-Z0-9]+")


def sanitize(value) -> str:
    if value is None:
        return ""
    s = str(value).strip()
    # spreadsheet exports sometimes wrap cells in quotes
    if len(s) >= 2 and s[0] == '"' and s[-1] == '"':
        s = s[1:-1].strip()
    return s


@dataclass(frozen=True)
class Municipio:
    tom: str
    ibge: str
    nome_tom: str
    nome_ibge: str
    uf: str

    @classmethod
    def build(cls, tom, ibge, nome_tom, nome_ibge, uf) -> "Municipio":
        """
        Build a record from raw cell values.

        Every field is trimmed (and unquoted), `uf` is uppercased, and an
        empty field or a `uf` that is not alphanumeric raises ValidationError.
        """
        values = {
            "tom": sanitize(tom),
            "ibge": sanitize(ibge),
            "nome_tom": sanitize(nome_tom),
            "nome_ibge": sanitize(nome_ibge),
            "uf": sanitize(uf).upper(),
        }
        missing = [k for k, v in values.items() if not v]
        if missing:
            raise ValidationError(f"empty field(s) {', '.join(missing)} in record {values}")
        if not REGION_PATTERN.fullmatch(values["uf"]):
            raise ValidationError(f"invalid UF {values['uf']!r} in record {values}")
        return cls(**values)

    @property
    def preferred_name(self) -> str:
        return self.nome_ibge or self.nome_tom


@dataclass(frozen=True)
class DerivationParams:
    iterations: int
    hash_bytes: int


@dataclass(frozen=True)
class DerivedResult:
    record: Municipio
    hash_hex: str

    def table_fields(self) -> List[str]:
        m = self.record
        return [m.tom, m.ibge, m.nome_tom, m.nome_ibge, m.uf, self.hash_hex]

    def as_json(self) -> Dict[str, str]:
        return dict(zip(JSON_KEYS, self.table_fields()))


RegionBatch = List[Municipio]
