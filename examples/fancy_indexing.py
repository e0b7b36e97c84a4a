import logging

import numpy as np
import torch
from tensor_key import *


def main():
    cube = Tensor(torch.arange(1000).reshape(10, 10, 10))

    # A list selects along the first axis only...
    rows = cube[[3, 4, 5]]
    print("cube[[3, 4, 5]] ->", rows.shape)

    # ...while a tuple addresses one axis per element
    element = cube[3, 4, 5]
    print("cube[3, 4, 5]   ->", element.shape, element.data.item())

    # Keys can be inspected before they reach the tensor
    for key in to_tensor_keys((slice(None, 5), [0, 2], -1)):
        print("  ", key)

    # Boolean masks, numpy arrays and tensors are all gathers
    vector = Tensor(torch.tensor([10, 20, 30, 40, 50]))
    print("mask            ->", vector[np.array([True, False, True, False, True])].data.tolist())

    vector[torch.tensor([0, 4], dtype=torch.int32)] = 0
    print("after write     ->", vector.data.tolist())
    return rows, element, vector


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
    main()
