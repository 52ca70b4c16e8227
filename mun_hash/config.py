from __future__ import annotations
from dataclasses import dataclass, field, fields
from typing import List, Optional
import yaml

from mun_hash.errors import InvalidParameter
from mun_hash.kdf import HASH_BYTES, PBKDF2_ITERATIONS
from mun_hash.models import DerivationParams

CATALOG_URL = "https://www.gov.br/receitafederal/dados/municipios.csv"
OUT_DIR_NAME = "mun_hash_por_uf"

@dataclass
class HashConfig:
    iterations: int = PBKDF2_ITERATIONS
    hash_bytes: int = HASH_BYTES        # 32 = 256 bits
    out_dir: str = OUT_DIR_NAME
    catalog_url: str = CATALOG_URL
    catalog_path: str = "municipios.csv"
    excluded_regions: List[str] = field(default_factory=lambda: ["EX"])  # "EX" = exterior
    workers: Optional[int] = None       # None = os.cpu_count()
    progress_every: int = 50
    download_timeout: float = 60.0

    @property
    def params(self) -> DerivationParams:
        return DerivationParams(iterations=self.iterations, hash_bytes=self.hash_bytes)

    def validate(self) -> "HashConfig":
        for name in ("iterations", "hash_bytes", "progress_every"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise InvalidParameter(f"{name} must be a positive integer, got {value!r}")
        if self.workers is not None and (not isinstance(self.workers, int) or self.workers <= 0):
            raise InvalidParameter(f"workers must be a positive integer or null, got {self.workers!r}")
        timeout = self.download_timeout
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise InvalidParameter(f"download_timeout must be a positive number, got {timeout!r}")
        self.excluded_regions = [str(r).strip().upper() for r in self.excluded_regions]
        return self

def load_config(path: Optional[str] = None, **overrides) -> HashConfig:
    """
    Load a run config from YAML; missing keys keep their defaults.
    `overrides` (e.g. CLI flags) win over file values when not None.
    """
    raw = {}
    if path:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        if not isinstance(raw, dict):
            raise InvalidParameter(f"config {path} must be a mapping, got {type(raw).__name__}")

    known = {f.name for f in fields(HashConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise InvalidParameter(f"unknown config key(s): {', '.join(unknown)}")

    raw.update({k: v for k, v in overrides.items() if v is not None})
    return HashConfig(**raw).validate()
