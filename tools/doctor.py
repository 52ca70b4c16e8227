from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

def main() -> None:
    print(f"Repo root: {REPO_ROOT}")
    needed = [
        REPO_ROOT / "config" / "default.yaml",
    ]

    missing = [p for p in needed if not p.exists()]
    if missing:
        print("MISSING FILES:")
        for p in missing:
            print(f"  - {p}")
        raise SystemExit(2)

    try:
        import faker  # noqa
        import httpx  # noqa
        import jsonschema  # noqa
        import openpyxl  # noqa
        import pandas  # noqa
        import yaml  # noqa
    except Exception as e:
        print("Python dependency problem:", repr(e))
        raise SystemExit(3)

    from mun_hash.config import load_config

    cfg = load_config(str(REPO_ROOT / "config" / "default.yaml"))
    print(f"Default config: {cfg.iterations} iterations, {cfg.hash_bytes} bytes -> {cfg.out_dir}/")
    print("OK: files exist + key dependencies import clean")

if __name__ == "__main__":
    main()
