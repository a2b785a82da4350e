"""Parallel metric computation and a cancellable background scheduler.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import CancelledError, Future, ProcessPoolExecutor, ThreadPoolExecutor
from typing import Callable, List, Optional, Sequence, Tuple

from .metrics import (
    N,
    SBoxMetrics,
    as_sbox_array,
    bic_nl_partition,
    calculate_all_metrics,
    calculate_bic_sac,
    calculate_sac,
    dap_partition,
    lap_partition,
    nl_partition,
    nonlinearity_from_walsh,
)

logger = logging.getLogger(__name__)


def split_range(start: int, stop: int, parts: int) -> List[Tuple[int, int]]:
    """Split [start, stop) into at most ``parts`` contiguous, non-empty chunks."""
    if parts < 1:
        raise ValueError(f"parts must be >= 1, got {parts}")
    total = stop - start
    if total <= 0:
        return []
    parts = min(parts, total)
    base, extra = divmod(total, parts)
    chunks: List[Tuple[int, int]] = []
    lo = start
    for i in range(parts):
        hi = lo + base + (1 if i < extra else 0)
        chunks.append((lo, hi))
        lo = hi
    return chunks


def calculate_all_metrics_parallel(sbox: Sequence[int], workers: int = 4) -> SBoxMetrics:
    """Same result as ``calculate_all_metrics`` with scans spread over processes.

    Walsh, LAP and DAP scans are chunked over their outer mask/difference
    loop and reduced with max. SAC and BIC-SAC run as one task each.
    """
    as_sbox_array(sbox)
    data = bytes(sbox)
    t0 = time.perf_counter()

    with ProcessPoolExecutor(max_workers=workers) as pool:
        nl_futs = [pool.submit(nl_partition, data, lo, hi) for lo, hi in split_range(0, N, workers)]
        bic_futs = [pool.submit(bic_nl_partition, data, lo, hi) for lo, hi in split_range(0, N, workers)]
        lap_futs = [pool.submit(lap_partition, data, lo, hi) for lo, hi in split_range(1, N, workers)]
        dap_futs = [pool.submit(dap_partition, data, lo, hi) for lo, hi in split_range(1, N, workers)]
        sac_fut = pool.submit(calculate_sac, data)
        bic_sac_fut = pool.submit(calculate_bic_sac, data)

        metrics = SBoxMetrics(
            nl=nonlinearity_from_walsh(max(f.result() for f in nl_futs)),
            sac=sac_fut.result(),
            bic_nl=nonlinearity_from_walsh(max(f.result() for f in bic_futs)),
            bic_sac=bic_sac_fut.result(),
            lap=max(f.result() for f in lap_futs) / (2 * N),
            dap=max(f.result() for f in dap_futs) / N,
        )

    logger.debug(
        "Parallel metrics (%d workers) computed in %.3fs: %s",
        workers, time.perf_counter() - t0, metrics.summary(),
    )
    return metrics


MetricsCallback = Callable[[SBoxMetrics], None]


class MetricsScheduler:
    """Runs metric computations in the background, keeping only the newest.

    Every ``submit`` starts a new generation and cancels the previous job.
    A job that finishes after a newer submission is stale: its result is
    dropped and the callback is not called. The callback runs on the worker
    thread while holding the scheduler lock; it may call ``submit`` itself.
    """

    def __init__(
        self,
        callback: Optional[MetricsCallback] = None,
        *,
        workers: int = 1,
        compute: Optional[Callable[[bytes], SBoxMetrics]] = None,
    ):
        self._callback = callback
        self._workers = workers
        self._compute = compute or self._default_compute
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="sboxlab-metrics")
        self._lock = threading.RLock()
        self._generation = 0
        self._current: Optional[Future] = None
        self._latest: Optional[SBoxMetrics] = None
        self.discarded = 0

    def _default_compute(self, sbox: bytes) -> SBoxMetrics:
        return calculate_all_metrics(sbox, workers=self._workers)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def latest(self) -> Optional[SBoxMetrics]:
        """Most recent non-stale result."""
        return self._latest

    def is_current(self, generation: int) -> bool:
        with self._lock:
            return generation == self._generation

    def submit(self, sbox: Sequence[int]) -> Future:
        as_sbox_array(sbox)
        data = bytes(sbox)
        with self._lock:
            self._generation += 1
            generation = self._generation
            if self._current is not None:
                self._current.cancel()
            fut = self._executor.submit(self._compute, data)
            self._current = fut
        fut.add_done_callback(lambda f, g=generation: self._on_done(f, g))
        logger.debug("Submitted metrics job, generation %d", generation)
        return fut

    def _on_done(self, fut: Future, generation: int) -> None:
        if fut.cancelled():
            logger.debug("Metrics job generation %d cancelled before start", generation)
            return
        exc = fut.exception()
        if exc is not None:
            logger.error("Metrics job generation %d failed: %s", generation, exc)
            return
        # submit blocks until the callback returns
        with self._lock:
            if generation != self._generation:
                self.discarded += 1
                logger.warning("Discarding stale metrics from generation %d", generation)
                return
            self._latest = fut.result()
            if self._callback is not None:
                self._callback(self._latest)

    def cancel(self) -> None:
        """Invalidate any pending job without starting a new one."""
        with self._lock:
            self._generation += 1
            if self._current is not None:
                self._current.cancel()
            self._current = None

    def wait(self, timeout: Optional[float] = None) -> Optional[SBoxMetrics]:
        """Block until the current job finishes and return its result."""
        fut = self._current
        if fut is None:
            return self._latest
        try:
            return fut.result(timeout=timeout)
        except CancelledError:
            return None

    def shutdown(self, wait: bool = True) -> None:
        """Drop queued jobs; a running job still finishes and reports."""
        self._executor.shutdown(wait=wait, cancel_futures=True)

    def __enter__(self) -> "MetricsScheduler":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()
