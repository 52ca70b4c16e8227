from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence, Tuple

from mun_hash.errors import InvalidParameter, IOFailure
from mun_hash.models import REGION_PATTERN, TABLE_HEADER, DerivedResult

logger = logging.getLogger(__name__)

DELIMITER = ";"


@dataclass(frozen=True)
class RegionArtifacts:
    region: str
    csv_path: Path
    json_path: Path
    rows: int


def table_path(out_dir: Path, region: str) -> Path:
    return out_dir / f"municipios_hash_{region}.csv"


def json_path(out_dir: Path, region: str) -> Path:
    return out_dir / f"municipios_hash_{region}.json"


def render_table(results: Sequence[DerivedResult]) -> str:
    # values are joined as-is: no quoting, no escaping of ';'
    lines = [DELIMITER.join(TABLE_HEADER)]
    lines.extend(DELIMITER.join(r.table_fields()) for r in results)
    return "\n".join(lines) + "\n"


def render_json(results: Sequence[DerivedResult]) -> str:
    payload = [r.as_json() for r in results]
    return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


def _write_tmp(path: Path, content: str) -> Path:
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    # a stale .tmp from an aborted run is ours to discard
    if tmp_path.exists():
        tmp_path.unlink()
    with tmp_path.open("x", encoding="utf-8", newline="") as handle:
        handle.write(content)
        handle.flush()
        os.fsync(handle.fileno())
    return tmp_path


def emit_region(out_dir: Path, region: str, results: Sequence[DerivedResult]) -> RegionArtifacts:
    """
    Write the delimited table and the JSON document for one region.

    Both documents are rendered from the same ordered results, written to
    `.tmp` siblings and only then moved over the final names. On failure
    neither file of the region is left under its final name.
    """
    if not REGION_PATTERN.fullmatch(region):
        raise InvalidParameter(f"region code {region!r} is not a valid file name component")

    out_dir.mkdir(parents=True, exist_ok=True)
    targets: List[Tuple[Path, str]] = [
        (table_path(out_dir, region), render_table(results)),
        (json_path(out_dir, region), render_json(results)),
    ]

    written: List[Tuple[Path, Path]] = []
    current = targets[0][0]
    try:
        for final, content in targets:
            current = final
            written.append((_write_tmp(final, content), final))
        for tmp, final in written:
            current = final
            os.replace(tmp, final)
    except OSError as exc:
        # a table without its matching JSON (or the reverse) is not a valid region
        for final, _ in targets:
            final.with_suffix(final.suffix + ".tmp").unlink(missing_ok=True)
            final.unlink(missing_ok=True)
        raise IOFailure(str(current), exc.strerror or str(exc)) from exc

    logger.debug("UF %s: wrote %s and %s", region, targets[0][0].name, targets[1][0].name)
    return RegionArtifacts(
        region=region,
        csv_path=targets[0][0],
        json_path=targets[1][0],
        rows=len(results),
    )
