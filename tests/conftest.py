import pytest


@pytest.fixture
def output_path(tmp_path):
    return str(tmp_path / "exports" / "out.json")
