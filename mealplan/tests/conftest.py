import gc

import pytest


@pytest.fixture(autouse=True)
def _collect_leftover_garbage():
    # Isolate tests that count weakly-referenced objects from cyclic garbage
    # left behind by earlier tests.
    gc.collect()
    yield
