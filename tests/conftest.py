import pytest

from stack6d.formats import save_array
from stack6d.generators import generate_minimal


@pytest.fixture
def minimal_array():
    return generate_minimal(seed=1234)


@pytest.fixture
def saved_minimal(tmp_path, minimal_array):
    meta_path = tmp_path / "minimal.meta"
    save_array(minimal_array, meta_path)
    return meta_path
