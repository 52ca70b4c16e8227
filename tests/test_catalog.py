from __future__ import annotations

import httpx
import openpyxl
import pytest

from mun_hash.catalog import download_catalog, load_catalog, parse_catalog_lines
from mun_hash.errors import CatalogError

SAMPLE = (
    "TOM;IBGE;NomeTOM;NomeIBGE;UF\n"
    "7107;3550308;SAO PAULO;São Paulo;SP\n"
    "\n"
    "6001;3304557;RIO DE JANEIRO;Rio de Janeiro;rj\n"
    "broken;line\n"
    "9701 ; 5300108 ; BRASILIA ; Brasília ; DF ;extra\n"
)


def test_header_blank_and_short_lines_are_skipped() -> None:
    records = parse_catalog_lines(SAMPLE.splitlines())
    assert [m.ibge for m in records] == ["3550308", "3304557", "5300108"]
    assert records[1].uf == "RJ"
    assert records[2].nome_ibge == "Brasília"


def test_first_line_is_data_without_header_markers() -> None:
    records = parse_catalog_lines(["7107;3550308;SAO PAULO;São Paulo;SP"])
    assert len(records) == 1


def test_rows_with_empty_fields_are_dropped() -> None:
    records = parse_catalog_lines(["7107;;SAO PAULO;São Paulo;SP", "9701;5300108;BRASILIA;Brasília;DF"])
    assert [m.ibge for m in records] == ["5300108"]


def test_load_csv_with_bom(tmp_path) -> None:
    path = tmp_path / "municipios.csv"
    path.write_bytes(SAMPLE.encode("utf-8-sig"))
    assert len(load_catalog(path)) == 3


def test_load_xlsx(tmp_path) -> None:
    path = tmp_path / "municipios.xlsx"
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.append(["TOM", "IBGE", "NomeTOM", "NomeIBGE", "UF"])
    ws.append(["7107", "3550308", "SAO PAULO", "São Paulo", "SP"])
    ws.append([9701, 5300108, "BRASILIA", "Brasília", "DF"])
    wb.save(path)

    records = load_catalog(path)
    assert [m.ibge for m in records] == ["3550308", "5300108"]
    assert records[1].tom == "9701"


def test_missing_catalog_is_a_catalog_error(tmp_path) -> None:
    with pytest.raises(CatalogError):
        load_catalog(tmp_path / "nope.csv")


def test_download_writes_response_bytes(tmp_path) -> None:
    body = SAMPLE.encode("utf-8")

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/dados/municipios.csv"
        return httpx.Response(200, content=body)

    client = httpx.Client(transport=httpx.MockTransport(handler))
    dest = download_catalog("https://example.test/dados/municipios.csv", tmp_path / "m.csv", client=client)

    assert dest.read_bytes() == body
    assert len(load_catalog(dest)) == 3


def test_download_http_error_is_a_catalog_error(tmp_path) -> None:
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(404)))
    with pytest.raises(CatalogError):
        download_catalog("https://example.test/missing.csv", tmp_path / "m.csv", client=client)
    assert not (tmp_path / "m.csv").exists()


def test_rows_with_path_like_uf_are_dropped() -> None:
    records = parse_catalog_lines(["7107;3550308;SAO PAULO;São Paulo;../SP", "9701;5300108;BRASILIA;Brasília;DF"])
    assert [m.uf for m in records] == ["DF"]
