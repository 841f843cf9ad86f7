# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD 3-Clause license found in the
# LICENSE file in the root directory of this source tree.

from typing import List, Optional, Tuple, Union

import torch

from .elements import Element, get_element

# magnitude bound on generated inputs
INPUT_RANGE = 1000


def make_input(
    elem: Union[str, torch.dtype, Element],
    num_elems: int,
    device: Union[str, torch.device] = "cpu",
    seed: int = 0,
    target: Optional[Union[str, torch.dtype, Element]] = None,
) -> torch.Tensor:
    """
    Deterministic flat input of ``num_elems`` values of ``elem``.

    Values stay inside the range of ``elem`` and, when given, of ``target``,
    so that casting them has a defined result on every backend.
    """
    elem = get_element(elem)
    low, high = -INPUT_RANGE, INPUT_RANGE
    for e in (elem, get_element(target) if target is not None else None):
        if e is not None and not e.is_floating_point:
            info = torch.iinfo(e.dtype)
            low, high = max(low, info.min), min(high, info.max)

    generator = torch.Generator().manual_seed(seed)
    if elem.is_floating_point:
        values = torch.rand(num_elems, generator=generator, dtype=torch.float64)
        values = values * (high - low) + low
    else:
        values = torch.randint(low, high + 1, (num_elems,), generator=generator)
    return values.to(elem.dtype).to(device)


def compute_errors(ref: torch.Tensor, res: torch.Tensor) -> Tuple[float, int]:
    """Max absolute error and number of mismatching elements between two tensors.

    Returns:
        Tuple of (max_absolute_error, num_mismatches). NaNs in the same
        position count as equal.
    """
    if ref.shape != res.shape:
        raise ValueError(f"Shape mismatch: {tuple(ref.shape)} vs {tuple(res.shape)}")
    if ref.numel() == 0:
        return 0.0, 0

    ref = ref.cpu()
    res = res.cpu()
    same = ref == res
    if ref.dtype.is_floating_point:
        same = same | (ref.isnan() & res.isnan())
    num_mismatches = int((~same).sum().item())

    ref_float = ref.double()
    res_float = res.double()
    diff = (ref_float - res_float).abs()
    # NaNs that agree contribute no error
    diff = torch.where(same, torch.zeros_like(diff), diff)
    return diff.max().item(), num_mismatches


def parse_pairs(value: str) -> List[Tuple[Element, Element]]:
    """Parse ``"f32:i32,i32:f32"`` into element pairs."""
    pairs = []
    for item in value.split(","):
        item = item.strip()
        if not item:
            continue
        if ":" not in item:
            raise ValueError(f"Invalid pair {item!r}, expected INPUT:OUTPUT")
        src, dst = item.split(":", 1)
        pairs.append((get_element(src), get_element(dst)))
    return pairs
