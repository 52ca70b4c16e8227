from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List

from jsonschema import ValidationError as SchemaValidationError, validate

from mun_hash.emitter import DELIMITER
from mun_hash.errors import ValidationError
from mun_hash.ids import build_salt, concatenated_password
from mun_hash.kdf import derive_hash_hex
from mun_hash.models import JSON_KEYS, TABLE_HEADER, Municipio
from mun_hash.pipeline import MANIFEST_NAME


def region_schema(hash_bytes: int) -> Dict[str, object]:
    props: Dict[str, object] = {k: {"type": "string", "minLength": 1} for k in JSON_KEYS}
    props["Hash"] = {"type": "string", "pattern": f"^[0-9a-f]{{{2 * hash_bytes}}}$"}
    return {
        "type": "array",
        "items": {
            "type": "object",
            "properties": props,
            "required": list(JSON_KEYS),
            "additionalProperties": False,
        },
    }


def _rederive(obj: Dict[str, str], iterations: int, hash_bytes: int) -> str:
    m = Municipio.build(obj["Tom"], obj["Ibge"], obj["NomeTom"], obj["NomeIbge"], obj["Uf"])
    return derive_hash_hex(concatenated_password(m), build_salt(m.ibge), iterations, hash_bytes)


def _validate_region(out_dir: Path, entry: Dict[str, object], iterations: int, hash_bytes: int, rederive: bool) -> List[str]:
    errors: List[str] = []
    uf = str(entry.get("uf"))
    csv_path = out_dir / str(entry.get("csv"))
    json_path = out_dir / str(entry.get("json"))

    if not csv_path.exists():
        errors.append(f"{uf}: missing {csv_path.name}")
    if not json_path.exists():
        errors.append(f"{uf}: missing {json_path.name}")
    if errors:
        return errors

    lines = csv_path.read_text(encoding="utf-8").splitlines()
    if not lines or lines[0] != DELIMITER.join(TABLE_HEADER):
        errors.append(f"{uf}: {csv_path.name} has a wrong or missing header")
        return errors
    # names may contain the delimiter, so rows are compared as whole lines
    rows = lines[1:]

    try:
        payload = json.loads(json_path.read_text(encoding="utf-8"))
    except ValueError as exc:
        errors.append(f"{uf}: {json_path.name} is not valid JSON: {exc}")
        return errors
    try:
        validate(instance=payload, schema=region_schema(hash_bytes))
    except SchemaValidationError as exc:
        errors.append(f"{uf}: {json_path.name} schema error: {exc.message}")
        return errors

    if len(rows) != len(payload):
        errors.append(f"{uf}: table has {len(rows)} rows, JSON has {len(payload)} objects")
    if entry.get("rows") != len(payload):
        errors.append(f"{uf}: manifest says {entry.get('rows')} rows, JSON has {len(payload)}")

    for i, (row, obj) in enumerate(zip(rows, payload), start=1):
        if row != DELIMITER.join(obj[k] for k in JSON_KEYS):
            errors.append(f"{uf}: row {i} differs between table and JSON")
        if obj["Uf"] != uf:
            errors.append(f"{uf}: row {i} belongs to UF {obj['Uf']}")
        if not rederive:
            continue
        try:
            rederived = _rederive(obj, iterations, hash_bytes)
        except ValidationError as exc:
            errors.append(f"{uf}: row {i} is not a valid record: {exc}")
            continue
        if rederived != obj["Hash"]:
            errors.append(f"{uf}: row {i} (ibge {obj['Ibge']}) hash does not match its fields")

    return errors


def verify_output(out_dir: Path, iterations: int | None = None, hash_bytes: int | None = None, rederive: bool = False) -> List[str]:
    """
    Check a finished output folder.

    Returns a list of problems; empty means the folder is consistent. When
    `iterations`/`hash_bytes` are given they must match the manifest.
    """
    errors: List[str] = []
    out_dir = out_dir.resolve()

    manifest_path = out_dir / MANIFEST_NAME
    if not manifest_path.exists():
        errors.append(f"Missing {MANIFEST_NAME}")
        return errors

    try:
        manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
    except ValueError as exc:
        errors.append(f"{MANIFEST_NAME} is not valid JSON: {exc}")
        return errors
    if not isinstance(manifest, dict):
        errors.append(f"{MANIFEST_NAME} is not a JSON object")
        return errors
    m_iterations = manifest.get("iterations")
    m_hash_bytes = manifest.get("hash_bytes")
    if not isinstance(m_iterations, int) or not isinstance(m_hash_bytes, int):
        errors.append("Manifest is missing iterations/hash_bytes")
        return errors
    if iterations is not None and iterations != m_iterations:
        errors.append(f"Manifest iterations {m_iterations} != expected {iterations}")
    if hash_bytes is not None and hash_bytes != m_hash_bytes:
        errors.append(f"Manifest hash_bytes {m_hash_bytes} != expected {hash_bytes}")

    for entry in manifest.get("regions", []):
        errors.extend(_validate_region(out_dir, entry, m_iterations, m_hash_bytes, rederive))

    return errors
