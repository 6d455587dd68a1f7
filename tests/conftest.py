import itertools

import pytest

from snapvc import Repository, WorkingTree
from snapvc.kv.memory import Memory


@pytest.fixture
def clock():
    return itertools.count(1_000_000).__next__


@pytest.fixture
def repo(tmp_path, clock):
    """An initialized in-memory repository over an empty working tree."""
    r = Repository(Memory(), WorkingTree(tmp_path), clock=clock)
    r.initialize()
    return r
