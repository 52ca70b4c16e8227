from __future__ import annotations

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, List, Optional

from mun_hash.errors import DerivationFailure, InvalidParameter
from mun_hash.ids import build_salt, concatenated_password
from mun_hash.kdf import derive_hash_hex
from mun_hash.logging_utils import format_elapsed
from mun_hash.models import DerivationParams, DerivedResult, Municipio, RegionBatch

logger = logging.getLogger(__name__)

DeriveFn = Callable[[str, bytes, int, int], str]
ProgressFn = Callable[[int, int], None]


def _derive_one(m: Municipio, params: DerivationParams, derive: DeriveFn) -> str:
    password = concatenated_password(m)
    salt = build_salt(m.ibge)
    return derive(password, salt, params.iterations, params.hash_bytes)


def _pool_size(max_workers: Optional[int], total: int) -> int:
    workers = max_workers or os.cpu_count() or 1
    return max(1, min(workers, total))


def derive_batch(
    region: str,
    batch: RegionBatch,
    params: DerivationParams,
    *,
    max_workers: Optional[int] = None,
    progress_every: int = 50,
    on_progress: Optional[ProgressFn] = None,
    derive: DeriveFn = derive_hash_hex,
) -> List[DerivedResult]:
    """
    Hash every record of one region on a bounded thread pool.

    Results come back in `batch` order, never completion order: each unit
    writes into the slot of its origin index and the slots are read only after
    every unit has finished.

    The first failing unit cancels whatever is still queued and fails the
    whole batch with DerivationFailure. InvalidParameter propagates as is.
    """
    if params.iterations <= 0 or params.hash_bytes <= 0:
        raise InvalidParameter(
            f"iterations and hash_bytes must be positive, got {params.iterations}/{params.hash_bytes}"
        )
    if progress_every <= 0:
        raise InvalidParameter(f"progress_every must be positive, got {progress_every}")

    total = len(batch)
    if total == 0:
        return []

    slots: List[Optional[DerivedResult]] = [None] * total
    started = time.perf_counter()
    done = 0

    executor = ThreadPoolExecutor(
        max_workers=_pool_size(max_workers, total),
        thread_name_prefix=f"kdf-{region}",
    )
    try:
        futures = {executor.submit(_derive_one, m, params, derive): i for i, m in enumerate(batch)}
        for future in as_completed(futures):
            idx = futures[future]
            try:
                hash_hex = future.result()
            except InvalidParameter:
                raise
            except Exception as exc:
                raise DerivationFailure(region, batch[idx].ibge, str(exc) or type(exc).__name__) from exc

            slots[idx] = DerivedResult(record=batch[idx], hash_hex=hash_hex)
            done += 1
            if done % progress_every == 0 or done == total:
                elapsed_ms = int((time.perf_counter() - started) * 1000)
                logger.info(
                    "  partial: %d/%d records hashed for UF %s | elapsed %s",
                    done,
                    total,
                    region,
                    format_elapsed(elapsed_ms),
                )
                if on_progress is not None:
                    on_progress(done, total)
    finally:
        # after a failure, queued units are dropped before the join
        executor.shutdown(wait=True, cancel_futures=True)

    results = [r for r in slots if r is not None]
    if len(results) != total:
        raise DerivationFailure(region, None, f"{total - len(results)} unit(s) produced no result")
    return results
