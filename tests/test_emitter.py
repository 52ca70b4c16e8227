from __future__ import annotations

import json
import os

import pytest

from mun_hash import emitter
from mun_hash.emitter import emit_region, render_json, render_table
from mun_hash.errors import InvalidParameter, IOFailure
from mun_hash.models import DerivedResult, Municipio


def _results() -> list[DerivedResult]:
    rows = [
        Municipio.build("6213", "3501608", "AMERICANA", "Americana", "SP"),
        Municipio.build("6291", "3509502", "CAMPINAS", "Campinas", "SP"),
        Municipio.build("7107", "3550308", "SAO PAULO", "São Paulo", "SP"),
    ]
    return [DerivedResult(record=m, hash_hex=f"{i:02x}" * 32) for i, m in enumerate(rows)]


def test_table_has_header_and_one_line_per_result() -> None:
    lines = render_table(_results()).splitlines()
    assert lines[0] == "TOM;IBGE;NomeTOM;NomeIBGE;UF;Hash"
    assert lines[1] == "6213;3501608;AMERICANA;Americana;SP;" + "00" * 32
    assert len(lines) == 4


def test_table_does_not_quote_delimiters() -> None:
    m = Municipio("1", "2", "A;B", "C", "SP")
    line = render_table([DerivedResult(m, "ff")]).splitlines()[1]
    assert line == "1;2;A;B;C;SP;ff"


def test_json_is_indented_and_keeps_non_ascii() -> None:
    text = render_json(_results())
    assert text.startswith("[\n  {\n")
    assert "São Paulo" in text
    assert json.loads(text)[2]["NomeIbge"] == "São Paulo"


def test_both_formats_list_the_same_records_in_order(tmp_path) -> None:
    results = _results()
    art = emit_region(tmp_path, "SP", results)

    table = [line.split(";") for line in art.csv_path.read_text(encoding="utf-8").splitlines()[1:]]
    doc = json.loads(art.json_path.read_text(encoding="utf-8"))
    assert table == [list(obj.values()) for obj in doc]
    assert art.rows == 3
    assert art.csv_path.name == "municipios_hash_SP.csv"
    assert art.json_path.name == "municipios_hash_SP.json"


def test_files_are_utf8_without_bom(tmp_path) -> None:
    art = emit_region(tmp_path, "SP", _results())
    assert not art.csv_path.read_bytes().startswith(b"\xef\xbb\xbf")
    assert not art.json_path.read_bytes().startswith(b"\xef\xbb\xbf")


def test_empty_region_writes_header_and_empty_list(tmp_path) -> None:
    art = emit_region(tmp_path, "AC", [])
    assert art.csv_path.read_text(encoding="utf-8") == "TOM;IBGE;NomeTOM;NomeIBGE;UF;Hash\n"
    assert json.loads(art.json_path.read_text(encoding="utf-8")) == []


def test_rewrite_truncates_previous_content(tmp_path) -> None:
    emit_region(tmp_path, "SP", _results())
    art = emit_region(tmp_path, "SP", _results()[:1])
    assert len(art.csv_path.read_text(encoding="utf-8").splitlines()) == 2
    assert not list(tmp_path.glob("*.tmp"))


def test_failed_rename_leaves_no_region_files(tmp_path, monkeypatch) -> None:
    real_replace = os.replace
    calls = []

    def failing_replace(src, dst):
        calls.append(dst)
        if len(calls) == 2:
            raise OSError(28, "No space left on device")
        return real_replace(src, dst)

    monkeypatch.setattr(emitter.os, "replace", failing_replace)

    with pytest.raises(IOFailure) as info:
        emit_region(tmp_path, "SP", _results())

    assert info.value.path.endswith("municipios_hash_SP.json")
    assert list(tmp_path.iterdir()) == []


def test_failed_rename_over_previous_run_leaves_no_region_files(tmp_path, monkeypatch) -> None:
    emit_region(tmp_path, "SP", _results())
    assert len(list(tmp_path.iterdir())) == 2

    real_replace = os.replace
    calls = []

    def failing_replace(src, dst):
        calls.append(dst)
        if len(calls) == 2:
            raise OSError(28, "No space left on device")
        return real_replace(src, dst)

    monkeypatch.setattr(emitter.os, "replace", failing_replace)

    with pytest.raises(IOFailure):
        emit_region(tmp_path, "SP", _results()[:1])

    assert list(tmp_path.iterdir()) == []


@pytest.mark.parametrize("region", ["../SP", "S/P", "", "sp"])
def test_region_codes_must_be_safe_file_name_parts(tmp_path, region: str) -> None:
    with pytest.raises(InvalidParameter):
        emit_region(tmp_path / "out", region, _results())
    assert not (tmp_path / "out").exists()
