from __future__ import annotations

import json
import logging
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Sequence

from mun_hash.config import HashConfig
from mun_hash.coordinator import DeriveFn, derive_batch
from mun_hash.emitter import RegionArtifacts, emit_region
from mun_hash.errors import DerivationFailure, IOFailure
from mun_hash.kdf import PBKDF2_DIGEST, derive_hash_hex
from mun_hash.logging_utils import format_elapsed
from mun_hash.models import Municipio, RegionBatch
from mun_hash.regions import group_by_region, region_counts

logger = logging.getLogger(__name__)

MANIFEST_NAME = "run_manifest.json"


@dataclass
class RunSummary:
    out_dir: Path
    artifacts: List[RegionArtifacts] = field(default_factory=list)
    elapsed_ms: int = 0

    @property
    def regions(self) -> List[str]:
        return [a.region for a in self.artifacts]

    @property
    def records(self) -> int:
        return sum(a.rows for a in self.artifacts)


def process_region(
    cfg: HashConfig,
    out_dir: Path,
    region: str,
    batch: RegionBatch,
    derive: DeriveFn = derive_hash_hex,
) -> RegionArtifacts:
    logger.info("processing UF %s (%d records)", region, len(batch))
    started = time.perf_counter()

    try:
        results = derive_batch(
            region,
            batch,
            cfg.params,
            max_workers=cfg.workers,
            progress_every=cfg.progress_every,
            derive=derive,
        )
        artifacts = emit_region(out_dir, region, results)
    except (DerivationFailure, IOFailure) as exc:
        logger.error("UF %s failed: %s", region, exc)
        raise

    elapsed = int((time.perf_counter() - started) * 1000)
    logger.info("UF %s done: CSV and JSON written in %s", region, format_elapsed(elapsed))
    return artifacts


def _write_manifest(cfg: HashConfig, out_dir: Path, artifacts: Sequence[RegionArtifacts]) -> Path:
    # no timestamps: an unchanged input must reproduce this file byte for byte
    manifest = {
        "kdf": f"pbkdf2-hmac-{PBKDF2_DIGEST}",
        "iterations": cfg.iterations,
        "hash_bytes": cfg.hash_bytes,
        "salt": "utf-8 bytes of IBGE code",
        "excluded_regions": cfg.excluded_regions,
        "regions": [
            {"uf": a.region, "rows": a.rows, "csv": a.csv_path.name, "json": a.json_path.name}
            for a in artifacts
        ],
    }
    path = out_dir / MANIFEST_NAME
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        tmp_path.write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")
        os.replace(tmp_path, path)
    except OSError as exc:
        raise IOFailure(str(path), exc.strerror or str(exc)) from exc
    return path


def run_pipeline(
    cfg: HashConfig,
    records: Sequence[Municipio],
    derive: DeriveFn = derive_hash_hex,
) -> RunSummary:
    """
    Hash and emit every region, one region at a time.

    Fail-fast: the first region whose derivation or write fails stops the
    run. Regions finished before it keep their files, and the manifest is
    rewritten after every region so it only ever lists files of this run.
    """
    out_dir = Path(cfg.out_dir).resolve()
    out_dir.mkdir(parents=True, exist_ok=True)

    groups: Dict[str, RegionBatch] = group_by_region(records, cfg.excluded_regions)
    logger.info("hashing %d region(s) into %s: %s", len(groups), out_dir, region_counts(groups))

    # a manifest left by an earlier run describes other parameters
    (out_dir / MANIFEST_NAME).unlink(missing_ok=True)

    started = time.perf_counter()
    summary = RunSummary(out_dir=out_dir)
    for region, batch in groups.items():
        summary.artifacts.append(process_region(cfg, out_dir, region, batch, derive))
        _write_manifest(cfg, out_dir, summary.artifacts)

    if not summary.artifacts:
        _write_manifest(cfg, out_dir, summary.artifacts)
    summary.elapsed_ms = int((time.perf_counter() - started) * 1000)
    return summary
