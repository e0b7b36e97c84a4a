"""Dense tensor type with key-based element access.

``Tensor`` wraps a ``torch.Tensor`` and plays the storage engine role for the
indexing layer: ``__getitem__`` and ``__setitem__`` run the caller's
expression through the classifier and composer, and the resulting canonical
keys are resolved here against the actual shape.
"""

import abc
import logging
from typing import Optional, Sequence

import numpy as np
import torch

from tensor_key import composer
from tensor_key.classifier import IndexExpression
from tensor_key.converter import array_to_tensor
from tensor_key.tensor_key import (
    INDEX_KEY_TYPES,
    Gather,
    IndexKey,
    Range,
    ScalarIndex,
    UnsupportedIndexType,
    _dtype_to_str,
    _type_name,
)
from tensor_key.utils import resolve_range

# ERROR MESSAGES
TOO_MANY_INDICES_MSG = "Too many indices for tensor of dimension {ndim}"
NEGATIVE_STEP_MSG = "Range step must be positive, got {step}"

logger = logging.getLogger(__name__)


class StorageEngine(abc.ABC):
    """Element access entry points consumed by the indexing layer.

    Single-key methods receive the key of a non-tuple expression, vector
    methods receive one key per leading axis. Axes beyond the last key are
    fully selected.
    """

    @abc.abstractmethod
    def get_item(self, key: IndexKey):
        raise NotImplementedError

    @abc.abstractmethod
    def get_item_vector(self, keys: Sequence[IndexKey]):
        raise NotImplementedError

    @abc.abstractmethod
    def set_item(self, key: IndexKey, value) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def set_item_vector(self, keys: Sequence[IndexKey], value) -> None:
        raise NotImplementedError


def _storage_overlaps(a: torch.Tensor, b: torch.Tensor) -> bool:
    a_storage, b_storage = a.untyped_storage(), b.untyped_storage()
    a_start, b_start = a_storage.data_ptr(), b_storage.data_ptr()
    return a_start < b_start + b_storage.nbytes() and b_start < a_start + a_storage.nbytes()


def _check_keys(keys) -> list[IndexKey]:
    if not isinstance(keys, (list, tuple)):
        raise UnsupportedIndexType(_type_name(keys))
    for key in keys:
        if not isinstance(key, INDEX_KEY_TYPES):
            raise UnsupportedIndexType(_type_name(key))
    return list(keys)


class Tensor(StorageEngine):
    """A dense CPU tensor indexed through canonical keys.

    Examples:
        t = Tensor(torch.arange(100).reshape(10, 10))
        t[[3, 4, 5]].shape      # (3, 10), one axis selected by a list
        t[(3, 4)].shape         # (), two axes selected by a tuple
        t[t.data[:, 0] > 50]    # boolean mask over axis 0
    """

    def __init__(self, data, dtype: Optional[torch.dtype] = None, logger: Optional[logging.Logger] = None):
        """Wrap existing data.

        Args:
            data: torch.Tensor, Tensor, numpy array or nested Python sequence.
                  torch tensors and shareable numpy arrays are wrapped without
                  copying when no dtype change is requested.
            dtype: Optional dtype to convert to
            logger: Logger for indexing diagnostics, defaults to this module's logger
        """
        if isinstance(data, Tensor):
            data = data.data
        elif isinstance(data, np.ndarray):
            data = array_to_tensor(data)
        self._data = torch.as_tensor(data, dtype=dtype)
        self._logger = logger

    @classmethod
    def from_numpy(cls, array: np.ndarray, inplace: bool = False, logger: Optional[logging.Logger] = None) -> "Tensor":
        """Create a tensor from a numpy array, sharing memory when possible.

        With ``inplace=True`` the memory must be shared, otherwise
        KeyConversionError is raised.
        """
        return cls(array_to_tensor(array, inplace=inplace), logger=logger)

    @property
    def data(self) -> torch.Tensor:
        return self._data

    @property
    def shape(self) -> tuple[int, ...]:
        return tuple(self._data.shape)

    @property
    def ndim(self) -> int:
        return self._data.ndim

    @property
    def dtype(self) -> torch.dtype:
        return self._data.dtype

    def to(self, dtype: torch.dtype, copy: bool = False) -> "Tensor":
        return Tensor(self._data.to(dtype, copy=copy), logger=self._logger)

    def numpy(self) -> np.ndarray:
        return self._data.numpy()

    def __len__(self) -> int:
        return len(self._data)

    def __dlpack__(self, *args, **kwargs):
        return self._data.__dlpack__(*args, **kwargs)

    def __dlpack_device__(self):
        return self._data.__dlpack_device__()

    def __repr__(self) -> str:
        return f"Tensor(shape={self.shape}, dtype={_dtype_to_str(self.dtype)})"

    # --- Caller-facing indexing ---
    def __getitem__(self, indices: IndexExpression) -> "Tensor":
        """Get a selection of the tensor.

        Args:
            indices: int, slice, list, tuple, numpy array or tensor.
                    A list selects along axis 0 only; a tuple addresses one
                    axis per element.

        Returns:
            Tensor: View for int/slice selections, copy when a gather is involved

        Examples:
            tensor[0]               # first row
            tensor[1:5:2]           # stepped range over axis 0
            tensor[[0, 2]]          # rows 0 and 2
            tensor[0, :, [1, 3]]    # mixed keys over three axes
        """
        return composer.get_item(self, indices, log=self._logger)

    def __setitem__(self, indices: IndexExpression, value) -> None:
        """Assign to a selection of the tensor.

        Args:
            indices: Same expressions as __getitem__
            value: Tensor, torch.Tensor, numpy array or Python scalar/sequence,
                   broadcastable to the selection and cast to this tensor's dtype
        """
        composer.set_item(self, indices, value, log=self._logger)

    # --- Diagnostic entry points taking already-built keys ---
    def _getitem(self, key: IndexKey) -> "Tensor":
        return self.get_item(_check_keys([key])[0])

    def _getitem_vector(self, keys: Sequence[IndexKey]) -> "Tensor":
        return self.get_item_vector(_check_keys(keys))

    def _setitem(self, key: IndexKey, value) -> None:
        self.set_item(_check_keys([key])[0], value)

    def _setitem_vector(self, keys: Sequence[IndexKey], value) -> None:
        self.set_item_vector(_check_keys(keys), value)

    # --- StorageEngine ---
    def get_item(self, key: IndexKey) -> "Tensor":
        return self.get_item_vector([key])

    def get_item_vector(self, keys: Sequence[IndexKey]) -> "Tensor":
        index = self._to_torch_index(keys)
        return Tensor(self._data[index], logger=self._logger)

    def set_item(self, key: IndexKey, value) -> None:
        self.set_item_vector([key], value)

    def set_item_vector(self, keys: Sequence[IndexKey], value) -> None:
        index = self._to_torch_index(keys)
        self._data[index] = self._prepare_value(value)

    def _prepare_value(self, value) -> torch.Tensor:
        if isinstance(value, Tensor):
            value = value.data
        value = torch.as_tensor(value, dtype=self.dtype, device=self._data.device)
        # Source and destination may overlap, e.g. t[1:5] = t[0:4]
        if _storage_overlaps(value, self._data):
            value = value.clone()
        return value

    def _to_torch_index(self, keys: Sequence[IndexKey]) -> tuple:
        """Resolve canonical keys against this tensor's shape.

        Range keys are resolved per axis; scalar indices and gather selectors
        are handed to torch as they are, so negative and out-of-range positions
        are resolved (or rejected with IndexError) by torch.
        """
        index = []
        axis = 0
        for key in keys:
            # A boolean mask covers as many axes as it has dimensions
            consumed = key.selector.ndim if isinstance(key, Gather) and key.is_mask else 1
            if axis + consumed > self.ndim:
                raise IndexError(TOO_MANY_INDICES_MSG.format(ndim=self.ndim))
            if isinstance(key, ScalarIndex):
                index.append(key.index)
            elif isinstance(key, Range):
                r = resolve_range(key, self._data.shape[axis])
                if r.step < 0:
                    raise ValueError(NEGATIVE_STEP_MSG.format(step=r.step))
                index.append(slice(r.start, r.stop, r.step))
            elif isinstance(key, Gather):
                index.append(key.selector)
            else:
                raise UnsupportedIndexType(_type_name(key))
            axis += consumed
        (self._logger or logger).debug(f"Resolved keys {list(keys)} to torch index on shape {self.shape}")
        return tuple(index)
