from sboxlab import CipherContext
from sboxlab.cipher.constants import AES_SBOX
from sboxlab.evaluation import avalanche_key, avalanche_plaintext, build_report, run_roundtrip_tests


def test_roundtrip_k44_is_perfect():
    result = run_roundtrip_tests(CipherContext.from_preset("K44"), num_vectors=40, seed=1337)
    assert result.is_perfect, result.failures
    assert result.total_vectors == 40
    assert result.success_rate == 1.0
    assert result.summary().startswith("[PASS] K44")
    assert result.to_dict()["failures"] == []


def test_roundtrip_is_deterministic():
    ctx = CipherContext.from_preset("KAES")
    a = run_roundtrip_tests(ctx, num_vectors=10, seed=7)
    b = run_roundtrip_tests(ctx, num_vectors=10, seed=7)
    assert (a.passed, a.failed) == (b.passed, b.failed) == (10, 0)


def test_roundtrip_records_failures_for_singular_matrix():
    ctx = CipherContext.create(bytes([0x01, 0x01, 0x04, 0x08, 0x10, 0x20, 0x40, 0x80]), allow_singular=True)
    result = run_roundtrip_tests(ctx, num_vectors=6, seed=1, max_failures_recorded=3)
    assert result.failed == 6
    assert len(result.failures) == 3
    assert "NonBijectiveSBoxError" in result.failures[0].error


def test_avalanche_near_half():
    pt = avalanche_plaintext(AES_SBOX, trials=40, seed=1337)
    key = avalanche_key(AES_SBOX, trials=40, seed=1337)
    assert 0.4 < pt.mean < 0.6
    assert 0.4 < key.mean < 0.6
    assert pt.trials == 40
    assert "fractions" not in pt.to_dict()


def test_report():
    report = build_report(CipherContext.from_preset("KAES"), avalanche_trials=10, roundtrip_vectors=6)
    d = report.to_dict()
    assert d["metrics"]["NL"] == 112
    assert d["bijective"] and d["balanced"]
    assert d["roundtrip"]["failed"] == 0
    assert len(d["avalanche"]) == 2
    assert "Evaluation Report: KAES" in report.to_summary()


def test_report_skips_roundtrip_for_non_bijective():
    ctx = CipherContext.create(bytes([0x01, 0x01, 0x04, 0x08, 0x10, 0x20, 0x40, 0x80]), allow_singular=True)
    report = build_report(ctx, avalanche_trials=0, roundtrip_vectors=5)
    assert report.roundtrip is None
    assert not report.bijective
