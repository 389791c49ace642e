import multiprocessing as mp

import pytest

from grid_morph.utils.parallel import (
    create_frame_pool,
    default_worker_count,
    frame_chunksize,
    frame_pool_size,
)


@pytest.fixture
def eight_cores(monkeypatch):
    monkeypatch.setattr(mp, "cpu_count", lambda: 8)


def test_default_worker_count_leaves_one_core(eight_cores):
    assert default_worker_count() == 7


def test_default_worker_count_single_core(monkeypatch):
    monkeypatch.setattr(mp, "cpu_count", lambda: 1)
    assert default_worker_count() == 1


def test_frame_pool_size_bounds(eight_cores):
    assert frame_pool_size(29) == 7
    assert frame_pool_size(29, max_workers=2) == 2
    assert frame_pool_size(3) == 3
    assert frame_pool_size(3, max_workers=16) == 3
    with pytest.raises(ValueError):
        frame_pool_size(0)


def test_frame_chunksize():
    assert frame_chunksize(3, 3) == 1
    assert frame_chunksize(29, 7) == 2
    assert frame_chunksize(100, 2) == 13


def test_create_frame_pool_runs_tasks():
    with create_frame_pool(2, max_workers=2) as pool:
        assert pool.map(abs, [-1, -2]) == [1, 2]
