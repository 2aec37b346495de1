import pytest

from scalargrad.autograd.core.tape import use_tape


@pytest.fixture(autouse=True)
def tape():
    """Every test records on its own tape."""
    with use_tape() as t:
        yield t
