import pytest

import rubytest


@pytest.fixture
def vm():
    """Fresh vm with captured output and no load path files."""
    return rubytest.make_vm()


@pytest.fixture
def home(tmp_path):
    """Home directory with an empty lib directory for require tests."""
    (tmp_path / "lib").mkdir()
    return tmp_path
