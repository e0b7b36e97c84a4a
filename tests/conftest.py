"""Shared test fixtures and configuration for tensor key tests."""

import logging

import pytest
import torch
import numpy as np
from tensor_key import StorageEngine, Tensor


@pytest.fixture
def torch_random_seed():
    """Ensure reproducible random results in tests."""
    torch.manual_seed(42)
    np.random.seed(42)
    yield


@pytest.fixture
def grid_tensor():
    """10x10 tensor holding 0..99 in row-major order."""
    return Tensor(torch.arange(100).reshape(10, 10))


@pytest.fixture
def cube_tensor():
    """10x10x10 tensor holding 0..999, so t[i, j, k] == 100 * i + 10 * j + k."""
    return Tensor(torch.arange(1000).reshape(10, 10, 10))


@pytest.fixture
def vector_tensor():
    """Five element vector [10, 20, 30, 40, 50]."""
    return Tensor(torch.tensor([10, 20, 30, 40, 50]))


@pytest.fixture
def random_tensor(torch_random_seed):
    """Random float tensor for round-trip checks."""
    return Tensor(torch.rand((6, 5, 4)))


@pytest.fixture
def injected_logger():
    """Logger handed to Tensor/composer in place of the module loggers."""
    return logging.getLogger("tests.injected")


class RecordingEngine(StorageEngine):
    """Storage engine that records which entry point received which keys."""

    def __init__(self):
        self.calls = []

    def get_item(self, key):
        self.calls.append(("get_item", key))
        return "single"

    def get_item_vector(self, keys):
        self.calls.append(("get_item_vector", list(keys)))
        return "vector"

    def set_item(self, key, value):
        self.calls.append(("set_item", key, value))

    def set_item_vector(self, keys, value):
        self.calls.append(("set_item_vector", list(keys), value))


@pytest.fixture
def recording_engine():
    return RecordingEngine()
