import threading

import pytest

from sboxlab.cipher.constants import AES_SBOX, EXPECTED_SBOX44
from sboxlab.evaluation.metrics import SBoxMetrics, calculate_all_metrics
from sboxlab.evaluation.parallel import MetricsScheduler, calculate_all_metrics_parallel, split_range


def test_split_range():
    assert split_range(0, 10, 3) == [(0, 4), (4, 7), (7, 10)]
    assert split_range(1, 3, 8) == [(1, 2), (2, 3)]
    assert split_range(5, 5, 2) == []
    with pytest.raises(ValueError):
        split_range(0, 10, 0)


@pytest.mark.parametrize("sbox", [AES_SBOX, EXPECTED_SBOX44])
def test_parallel_matches_sequential(sbox):
    assert calculate_all_metrics_parallel(sbox, workers=2) == calculate_all_metrics(sbox)


def test_workers_argument_routes_to_parallel():
    assert calculate_all_metrics(AES_SBOX, workers=2) == calculate_all_metrics(AES_SBOX)


def _fake_metrics(nl: int) -> SBoxMetrics:
    return SBoxMetrics(nl=nl, sac=0.5, bic_nl=nl, bic_sac=0.5, lap=0.0625, dap=0.015625)


def test_scheduler_discards_stale_result():
    release_first = threading.Event()
    first_started = threading.Event()
    delivered = []

    def compute(sbox: bytes) -> SBoxMetrics:
        if sbox == AES_SBOX:
            first_started.set()
            release_first.wait(5)
            return _fake_metrics(1)
        return _fake_metrics(2)

    with MetricsScheduler(delivered.append, compute=compute) as scheduler:
        stale = scheduler.submit(AES_SBOX)
        assert first_started.wait(5)
        fresh = scheduler.submit(EXPECTED_SBOX44)
        release_first.set()
        assert stale.result(5).nl == 1
        assert fresh.result(5).nl == 2
        assert scheduler.wait(5).nl == 2

    assert [r.nl for r in delivered] == [2]
    assert scheduler.latest.nl == 2
    assert scheduler.discarded == 1
    assert scheduler.generation >= 2


def test_scheduler_cancel_drops_result():
    release = threading.Event()
    started = threading.Event()
    delivered = []

    def compute(sbox: bytes) -> SBoxMetrics:
        started.set()
        release.wait(5)
        return _fake_metrics(3)

    scheduler = MetricsScheduler(delivered.append, compute=compute)
    fut = scheduler.submit(AES_SBOX)
    assert started.wait(5)
    scheduler.cancel()
    release.set()
    fut.result(5)
    scheduler.shutdown()
    assert delivered == []
    assert scheduler.latest is None


def test_scheduler_real_compute():
    done = threading.Event()
    results = []

    def on_result(metrics: SBoxMetrics) -> None:
        results.append(metrics)
        done.set()

    with MetricsScheduler(on_result) as scheduler:
        scheduler.submit(AES_SBOX)
        assert done.wait(60)
    assert results[0].nl == 112


def test_scheduler_rejects_bad_sbox():
    with MetricsScheduler() as scheduler:
        with pytest.raises(ValueError):
            scheduler.submit(b"\x00" * 10)


def test_submit_during_delivery_waits_for_callback():
    go = threading.Event()
    in_callback = threading.Event()
    release = threading.Event()
    observed = []
    both_delivered = threading.Event()

    def compute(sbox: bytes) -> SBoxMetrics:
        go.wait(5)
        return _fake_metrics(1 if sbox == AES_SBOX else 2)

    def on_result(metrics: SBoxMetrics) -> None:
        before = scheduler.generation
        in_callback.set()
        release.wait(5)
        observed.append((metrics.nl, before, scheduler.generation))
        if len(observed) == 2:
            both_delivered.set()

    scheduler = MetricsScheduler(on_result, compute=compute)
    scheduler.submit(AES_SBOX)
    go.set()
    assert in_callback.wait(5)
    in_callback.clear()

    second = threading.Thread(target=scheduler.submit, args=(EXPECTED_SBOX44,))
    second.start()
    second.join(0.2)
    release.set()
    second.join(5)
    assert both_delivered.wait(5)
    scheduler.shutdown()

    assert observed[0] == (1, 1, 1)
    assert [nl for nl, _, _ in observed] == [1, 2]
    assert scheduler.discarded == 0
