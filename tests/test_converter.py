"""Tests for array, sequence and native tensor conversion."""

import numpy as np
import pytest
import torch
from tensor_key import KeyConversionError, Tensor
from tensor_key.converter import array_to_tensor, native_to_tensor, sequence_to_tensor


class BrokenTensor:
    """Claims to export DLPack but fails to hand over a buffer."""

    def __dlpack__(self, *args, **kwargs):
        raise BufferError("corrupt handle")

    def __dlpack_device__(self):
        return (1, 0)


class TestArrayToTensor:

    def test_shares_memory_when_possible(self):
        array = np.array([1, 2, 3])
        tensor = array_to_tensor(array)
        array[0] = 10
        assert tensor[0].item() == 10

    def test_read_only_array_is_copied(self):
        array = np.array([1, 2, 3])
        array.setflags(write=False)
        tensor = array_to_tensor(array)
        assert tensor.tolist() == [1, 2, 3]

    def test_negative_strides_are_copied(self):
        array = np.arange(5)[::-1]
        assert array_to_tensor(array).tolist() == [4, 3, 2, 1, 0]

    def test_inplace_requires_shareable_memory(self):
        array = np.arange(5)[::-1]
        with pytest.raises(KeyConversionError):
            array_to_tensor(array, inplace=True)

    def test_non_native_byte_order_is_copied(self):
        array = np.array([0, 2, 4], dtype=">i8")
        tensor = array_to_tensor(array)
        assert tensor.dtype == torch.int64
        assert tensor.tolist() == [0, 2, 4]
        array[0] = 9
        assert tensor[0].item() == 0

    def test_inplace_rejects_non_native_byte_order(self):
        with pytest.raises(KeyConversionError, match="byte order"):
            array_to_tensor(np.array([0, 2], dtype=">i8"), inplace=True)

    def test_unsupported_dtype(self):
        with pytest.raises(KeyConversionError, match="dtype"):
            array_to_tensor(np.array(["a", "b"]))


class TestSequenceToTensor:

    def test_integers(self):
        result = sequence_to_tensor([3, 4, 5])
        assert result.dtype == torch.int64
        assert result.tolist() == [3, 4, 5]

    def test_booleans(self):
        assert sequence_to_tensor([True, False]).dtype == torch.bool

    def test_nested(self):
        assert sequence_to_tensor([[0, 1], (1, 0)]).shape == (2, 2)

    def test_empty(self):
        result = sequence_to_tensor([])
        assert result.dtype == torch.int64
        assert result.shape == (0,)

    def test_elements_already_tensors(self):
        result = sequence_to_tensor([torch.tensor(1), torch.tensor(3)])
        assert result.tolist() == [1, 3]

    def test_elements_already_arrays(self):
        result = sequence_to_tensor([np.array([0, 1]), np.array([1, 0])])
        assert result.tolist() == [[0, 1], [1, 0]]

    @pytest.mark.parametrize("sequence", [[[0, 1], [2]], ["a", "b"]])
    def test_invalid(self, sequence):
        with pytest.raises(KeyConversionError):
            sequence_to_tensor(sequence)


class TestNativeToTensor:

    def test_torch_tensor_passes_through(self):
        t = torch.tensor([1, 2])
        assert native_to_tensor(t) is t

    def test_wrapper_unwrapped(self):
        wrapped = Tensor(torch.tensor([1, 2]))
        assert native_to_tensor(wrapped) is wrapped.data

    def test_foreign_exporter_failure(self):
        with pytest.raises(KeyConversionError, match="BrokenTensor"):
            native_to_tensor(BrokenTensor())
