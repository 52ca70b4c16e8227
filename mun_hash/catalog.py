"""
Catalog acquisition and parsing.

The Receita Federal catalog is a `;`-separated file with the columns
TOM;IBGE;NomeTOM;NomeIBGE;UF. An `.xlsx` export with the same column order
is accepted too.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import httpx
import openpyxl

from mun_hash.errors import CatalogError, ValidationError
from mun_hash.models import Municipio

logger = logging.getLogger(__name__)

CATALOG_FIELDS = 5


def download_catalog(url: str, dest: Path, timeout: float = 60.0, client: Optional[httpx.Client] = None) -> Path:
    owns_client = client is None
    if client is None:
        client = httpx.Client(timeout=timeout, follow_redirects=True)
    try:
        resp = client.get(url)
        resp.raise_for_status()
    except httpx.HTTPError as exc:
        raise CatalogError(f"could not download catalog from {url}: {exc}") from exc
    finally:
        if owns_client:
            client.close()

    dest.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = dest.with_suffix(dest.suffix + ".tmp")
    tmp_path.write_bytes(resp.content)
    os.replace(tmp_path, dest)
    logger.info("downloaded %d bytes from %s to %s", len(resp.content), url, dest)
    return dest


def _is_header(first_line: str) -> bool:
    upper = first_line.upper()
    return "IBGE" in upper or "UF" in upper


def parse_catalog_rows(rows: Iterable[Sequence[object]]) -> List[Municipio]:
    """
    Turn raw rows into records.

    The first row is skipped when it looks like a header (mentions IBGE or UF).
    Blank rows and rows with fewer than five cells are ignored; rows with an
    empty required field or an unusable UF are logged and dropped.
    """
    records: List[Municipio] = []
    skipped = 0
    for i, row in enumerate(rows):
        cells = ["" if c is None else str(c) for c in row]
        if i == 0 and _is_header(";".join(cells)):
            continue
        if not "".join(cells).strip():
            continue
        if len(cells) < CATALOG_FIELDS:
            skipped += 1
            continue
        try:
            records.append(Municipio.build(*cells[:CATALOG_FIELDS]))
        except ValidationError as exc:
            skipped += 1
            logger.warning("row %d dropped: %s", i + 1, exc)

    if skipped:
        logger.info("skipped %d malformed catalog row(s)", skipped)
    return records


def parse_catalog_lines(lines: Iterable[str]) -> List[Municipio]:
    return parse_catalog_rows(line.strip().split(";") for line in lines)


def _xlsx_rows(path: Path):
    wb = openpyxl.load_workbook(path, read_only=True, data_only=True)
    try:
        ws = wb[wb.sheetnames[0]]
        for row in ws.iter_rows(values_only=True):
            yield list(row)
    finally:
        wb.close()


def load_catalog(path: Path) -> List[Municipio]:
    if not path.exists():
        raise CatalogError(f"catalog not found: {path}")

    try:
        if path.suffix.lower() == ".xlsx":
            records = parse_catalog_rows(_xlsx_rows(path))
        else:
            text = path.read_text(encoding="utf-8-sig")
            records = parse_catalog_lines(text.splitlines())
    except (OSError, UnicodeDecodeError) as exc:
        raise CatalogError(f"could not read catalog {path}: {exc}") from exc

    logger.info("records read: %d", len(records))
    return records
