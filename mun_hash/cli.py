from __future__ import annotations

import argparse
import logging
import os
import time
from pathlib import Path

from mun_hash.catalog import download_catalog, load_catalog
from mun_hash.config import load_config
from mun_hash.errors import MunHashError
from mun_hash.logging_utils import configure_logging, format_elapsed
from mun_hash.pipeline import run_pipeline
from mun_hash.synth import generate_catalog, write_catalog
from mun_hash.validator import verify_output

logger = logging.getLogger(__name__)


def _cmd_doctor(args: argparse.Namespace) -> int:
    try:
        import httpx  # noqa: F401
        import jsonschema  # noqa: F401
        import openpyxl  # noqa: F401
        import pandas  # noqa: F401
        import yaml  # noqa: F401
        import faker  # noqa: F401
    except Exception as e:
        print("Python dependency problem:", repr(e))
        return 3

    cfg = load_config(args.config)
    out_dir = Path(cfg.out_dir).resolve()
    target = out_dir if out_dir.exists() else out_dir.parent
    if not os.access(target, os.W_OK):
        print(f"Output folder not writable: {target}")
        return 2

    print(f"Output folder: {out_dir}")
    print(f"PBKDF2: {cfg.iterations} iterations, {cfg.hash_bytes} bytes, workers={cfg.workers or os.cpu_count()}")
    print("OK: key dependencies import clean")
    return 0


def _cmd_fetch(args: argparse.Namespace) -> int:
    cfg = load_config(args.config)
    url = args.url or cfg.catalog_url
    dest = Path(args.dest or cfg.catalog_path).resolve()
    download_catalog(url, dest, timeout=cfg.download_timeout)
    print(f"Wrote: {dest}")
    return 0


def _cmd_run(args: argparse.Namespace) -> int:
    started = time.perf_counter()
    cfg = load_config(
        args.config,
        out_dir=args.out_dir,
        iterations=args.iterations,
        hash_bytes=args.hash_bytes,
        workers=args.workers,
    )
    catalog = Path(args.catalog or cfg.catalog_path).resolve()

    if args.download:
        logger.info("downloading municipality catalog from %s", cfg.catalog_url)
        download_catalog(cfg.catalog_url, catalog, timeout=cfg.download_timeout)

    records = load_catalog(catalog)
    if not records:
        print(f"Catalog is empty: {catalog}")
        return 0

    summary = run_pipeline(cfg, records)

    total_ms = int((time.perf_counter() - started) * 1000)
    print()
    print("===== SUMMARY =====")
    print(f"Regions written: {len(summary.regions)}")
    print(f"Records hashed: {summary.records}")
    print(f"Output folder: {summary.out_dir}")
    print(f"Total time: {format_elapsed(total_ms)}")
    return 0


def _cmd_verify(args: argparse.Namespace) -> int:
    cfg = load_config(args.config, out_dir=args.out_dir)
    out_dir = Path(cfg.out_dir)
    errors = verify_output(out_dir, rederive=args.rederive)
    if errors:
        print("VERIFICATION FAILED:")
        for e in errors:
            print(f"  - {e}")
        return 2
    print(f"OK: {out_dir.resolve()} is consistent")
    return 0


def _cmd_synth(args: argparse.Namespace) -> int:
    records = generate_catalog(args.rows, seed=args.seed)
    out = write_catalog(records, Path(args.out).resolve())
    print(f"Wrote synthetic catalog: {out} ({len(records)} rows)")
    return 0


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(prog="mun-hash", description="Per-UF PBKDF2 hashes for the municipality catalog")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default INFO)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_doc = sub.add_parser("doctor", help="Check Python deps and output folder")
    p_doc.add_argument("--config", help="YAML config path")
    p_doc.set_defaults(func=_cmd_doctor)

    p_fetch = sub.add_parser("fetch", help="Download the municipality catalog")
    p_fetch.add_argument("--config", help="YAML config path")
    p_fetch.add_argument("--url", help="Catalog URL (defaults to config catalog_url)")
    p_fetch.add_argument("--dest", help="Where to save the catalog (defaults to config catalog_path)")
    p_fetch.set_defaults(func=_cmd_fetch)

    p_run = sub.add_parser("run", help="Hash the catalog and write CSV + JSON per UF")
    p_run.add_argument("--config", help="YAML config path")
    p_run.add_argument("--catalog", help="Catalog file (.csv or .xlsx)")
    p_run.add_argument("--download", action="store_true", help="Download the catalog first")
    p_run.add_argument("--out-dir", help="Output folder")
    p_run.add_argument("--iterations", type=int, help="PBKDF2 iteration count")
    p_run.add_argument("--hash-bytes", type=int, help="Hash length in bytes")
    p_run.add_argument("--workers", type=int, help="Worker threads per UF")
    p_run.set_defaults(func=_cmd_run)

    p_ver = sub.add_parser("verify", help="Check an output folder for consistency")
    p_ver.add_argument("--config", help="YAML config path")
    p_ver.add_argument("--out-dir", help="Output folder")
    p_ver.add_argument("--rederive", action="store_true", help="Recompute every hash (slow)")
    p_ver.set_defaults(func=_cmd_verify)

    p_syn = sub.add_parser("synth", help="Write a synthetic catalog for offline runs")
    p_syn.add_argument("out", help="Output catalog path")
    p_syn.add_argument("--rows", type=int, default=500, help="Number of rows")
    p_syn.add_argument("--seed", type=int, help="Fixed seed for a reproducible catalog")
    p_syn.set_defaults(func=_cmd_synth)

    args = parser.parse_args(argv)
    configure_logging(getattr(logging, str(args.log_level).upper(), logging.INFO))

    try:
        rc = args.func(args)
    except MunHashError as exc:
        logger.error("%s", exc)
        rc = 1
    raise SystemExit(rc)


if __name__ == "__main__":
    main()
