from __future__ import annotations

from mun_hash.errors import InvalidParameter
from mun_hash.models import Municipio


def build_salt(identifier: str) -> bytes:
    # salt is the raw UTF-8 of the IBGE code: no digest, no padding.
    # Changing this changes every hash ever emitted.
    if not identifier:
        raise InvalidParameter("salt identifier must be a non-empty string")
    return identifier.encode("utf-8")


def concatenated_password(m: Municipio) -> str:
    # TOM+IBGE+NomeTOM+NomeIBGE+UF, no separator
    return f"{m.tom}{m.ibge}{m.nome_tom}{m.nome_ibge}{m.uf}"
