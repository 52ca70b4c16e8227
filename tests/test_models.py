from __future__ import annotations

import pytest

from mun_hash.errors import ValidationError
from mun_hash.models import DerivedResult, Municipio


def test_build_trims_unquotes_and_uppercases() -> None:
    m = Municipio.build(" 7107 ", '"3550308"', " SAO PAULO", "São Paulo ", " sp ")
    assert m == Municipio("7107", "3550308", "SAO PAULO", "São Paulo", "SP")


def test_build_rejects_blank_fields() -> None:
    with pytest.raises(ValidationError):
        Municipio.build("7107", "   ", "SAO PAULO", "São Paulo", "SP")


def test_preferred_name_is_ibge_name() -> None:
    m = Municipio.build("5869", "3303302", "NITEROI", "Niterói", "RJ")
    assert m.preferred_name == "Niterói"


def test_result_views_share_field_order() -> None:
    m = Municipio.build("5869", "3303302", "NITEROI", "Niterói", "RJ")
    r = DerivedResult(record=m, hash_hex="ab" * 32)
    assert r.table_fields() == ["5869", "3303302", "NITEROI", "Niterói", "RJ", "ab" * 32]
    assert list(r.as_json().values()) == r.table_fields()
    assert list(r.as_json()) == ["Tom", "Ibge", "NomeTom", "NomeIbge", "Uf", "Hash"]


@pytest.mark.parametrize("uf", ["../SP", "S/P", "R J"])
def test_build_rejects_uf_unfit_for_file_names(uf: str) -> None:
    with pytest.raises(ValidationError):
        Municipio.build("7107", "3550308", "SAO PAULO", "São Paulo", uf)
