import sys
from pathlib import Path

import pytest

# Ensure project root is on path when running without an install
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from sboxlab.cipher.constants import AES_SBOX, K44_MATRIX, KAES_MATRIX


@pytest.fixture
def aes_sbox() -> bytes:
    return AES_SBOX


@pytest.fixture
def k44_matrix() -> bytes:
    return K44_MATRIX


@pytest.fixture
def kaes_matrix() -> bytes:
    return KAES_MATRIX
