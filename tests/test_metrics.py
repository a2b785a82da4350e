import random

import pytest

from sboxlab import calculate_all_metrics
from sboxlab.cipher.constants import AES_SBOX, EXPECTED_SBOX44
from sboxlab.evaluation import metrics as m

TOL = 1e-4


def test_aes_reference_metrics():
    result = calculate_all_metrics(AES_SBOX)
    assert result.nl == 112
    assert result.sac == pytest.approx(0.50488, abs=TOL)
    assert result.bic_nl == 112
    assert result.lap == pytest.approx(0.0625, abs=TOL)
    assert result.dap == pytest.approx(0.015625, abs=TOL)
    assert result.bic_sac == pytest.approx(0.49540, abs=TOL)


def test_k44_metrics():
    result = calculate_all_metrics(EXPECTED_SBOX44)
    assert result.nl == 112
    assert result.bic_nl == 112
    assert result.lap == pytest.approx(0.0625, abs=TOL)
    assert result.dap == pytest.approx(0.015625, abs=TOL)
    assert abs(result.sac - 0.5) < 0.01
    assert result.bic_sac == pytest.approx(0.49763, abs=TOL)


def test_to_dict_keys_and_roundtrip():
    result = calculate_all_metrics(AES_SBOX)
    d = result.to_dict()
    assert list(d) == ["NL", "SAC", "BICNL", "BICSAC", "LAP", "DAP"]
    assert m.SBoxMetrics.from_dict(d) == result
    assert "NL=112" in result.summary()


def test_identity_sbox_is_linear():
    identity = bytes(range(256))
    assert m.calculate_nl(identity) == 0
    assert m.calculate_bic_nl(identity) == 0
    assert m.calculate_lap(identity) == pytest.approx(0.5)
    assert m.calculate_dap(identity) == pytest.approx(1.0)
    assert m.calculate_du(identity) == 256
    assert m.calculate_algebraic_degree(identity) == 1


def test_boolean_nonlinearity():
    # bent-free checks on simple functions
    assert m.boolean_nonlinearity([0] * 256) == 0
    parity = [bin(x).count("1") & 1 for x in range(256)]
    assert m.boolean_nonlinearity(parity) == 0
    w = m.walsh_spectrum([0] * 256)
    assert w[0] == 256 and all(v == 0 for v in w[1:])


def test_sac_matrix_orientation_and_mean():
    matrix = m.calculate_sac_matrix(AES_SBOX)
    assert len(matrix) == 8 and all(len(row) == 8 for row in matrix)
    flat = [v for row in matrix for v in row]
    assert sum(flat) / 64 == pytest.approx(m.calculate_sac(AES_SBOX))
    # flipping input bit 0 of a "shift left" table flips only output bit 1
    shifted = bytes(((x << 1) | (x >> 7)) & 0xFF for x in range(256))
    sm = m.calculate_sac_matrix(shifted)
    assert sm[1][0] == 1.0
    assert sm[0][0] == 0.0


def test_bic_sac_matrix_shape_and_mean():
    matrix = m.calculate_bic_sac_matrix(AES_SBOX)
    values = []
    for j in range(8):
        assert matrix[j][j] is None
        for k in range(8):
            if j != k:
                assert matrix[j][k] == matrix[k][j]
            if j < k:
                values.append(matrix[j][k])
    assert len(values) == 28
    assert sum(values) / 28 == pytest.approx(m.calculate_bic_sac(AES_SBOX))


def test_bic_sac_is_agreement_of_output_changes():
    # two copies of the same output bit always change together
    twin = bytes((x & 1) * 0b11 for x in range(256))
    matrix = m.calculate_bic_sac_matrix(twin)
    assert matrix[0][1] == 1.0


def test_partitions_reduce_to_whole_scan():
    sbox = EXPECTED_SBOX44
    whole = m.lap_partition(sbox)
    parts = [m.lap_partition(sbox, lo, hi) for lo, hi in [(1, 50), (50, 200), (200, 256)]]
    assert max(parts) == whole
    whole = m.dap_partition(sbox)
    assert max(m.dap_partition(sbox, lo, hi) for lo, hi in [(0, 128), (128, 256)]) == whole
    whole = m.nl_partition(sbox)
    assert max(m.nl_partition(sbox, lo, hi) for lo, hi in [(0, 100), (100, 256)]) == whole
    assert m.lap_partition(sbox, 10, 10) == 0


def test_aes_extra_properties():
    assert m.calculate_du(AES_SBOX) == 4
    assert m.calculate_algebraic_degree(AES_SBOX) == 7


def test_random_permutation_metrics_in_range():
    rng = random.Random(1337)
    perm = list(range(256))
    rng.shuffle(perm)
    result = calculate_all_metrics(perm)
    assert 0 <= result.nl <= 120
    assert 0 < result.sac < 1
    assert 0 < result.lap <= 0.5
    assert 0 < result.dap <= 1


def test_wrong_length_is_contract_violation():
    with pytest.raises(ValueError):
        calculate_all_metrics(AES_SBOX[:200])
    with pytest.raises(ValueError):
        m.calculate_nl([0] * 255 + [256])


def test_ratings():
    assert m.rate_metrics(m.AES_METRICS)["NL"] == "good"
    bad = m.SBoxMetrics(nl=0, sac=0.0, bic_nl=0, bic_sac=1.0, lap=0.5, dap=1.0)
    assert set(m.rate_metrics(bad).values()) == {"poor"}


def test_metrics_report():
    report = m.metrics_report(AES_SBOX)
    assert report["metrics"]["NL"] == 112
    assert report["differential_uniformity"] == 4
    assert all(v == pytest.approx(0.0, abs=TOL) for v in report["deviation_from_aes"].values())
    assert report["bic_sac_matrix"][0][0] is None


@pytest.mark.parametrize(
    "sbox, reference",
    [(AES_SBOX, m.AES_METRICS), (EXPECTED_SBOX44, m.K44_EXPECTED_METRICS)],
)
def test_reference_constants_match_engine(sbox, reference):
    result = calculate_all_metrics(sbox)
    assert result.nl == reference.nl
    assert result.bic_nl == reference.bic_nl
    assert result.sac == pytest.approx(reference.sac, abs=TOL)
    assert result.bic_sac == pytest.approx(reference.bic_sac, abs=TOL)
    assert result.lap == pytest.approx(reference.lap, abs=TOL)
    assert result.dap == pytest.approx(reference.dap, abs=TOL)
