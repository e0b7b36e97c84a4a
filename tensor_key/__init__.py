from .tensor_key import (
    Gather,
    IndexKey,
    KeyConversionError,
    Range,
    ScalarIndex,
    TensorKeyError,
    UnsupportedIndexType,
    normalize_selector,
)
from .classifier import to_tensor_key, to_tensor_keys
from .composer import ResolvedIndex, get_item, resolve_index, set_item
from .tensor import StorageEngine, Tensor
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("tensor-key")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    'Tensor',
    'StorageEngine',
    'ScalarIndex',
    'Range',
    'Gather',
    'IndexKey',
    'TensorKeyError',
    'UnsupportedIndexType',
    'KeyConversionError',
    'normalize_selector',
    'to_tensor_key',
    'to_tensor_keys',
    'ResolvedIndex',
    'resolve_index',
    'get_item',
    'set_item',
]
