# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD 3-Clause license found in the
# LICENSE file in the root directory of this source tree.

"""
ElemCast: a build-time-parametrized element-wise cast kernel.

Example:
    import torch
    import ElemCast

    x = torch.tensor([1.5, -1.5, 3.9], device="cuda")
    ElemCast.cast(x, "i32")  # tensor([1, -1, 3], dtype=torch.int32)
"""

from ElemCast.context import CastContext
from ElemCast.dispatch import DispatchGrid, exact_workgroups, linear_index
from ElemCast.elements import ELEMENTS, Element, get_element
from ElemCast.errors import (
    DispatchError,
    ElemCastError,
    InvalidSettingsError,
    UnsupportedElementError,
)
from ElemCast.ops import cast
from ElemCast.settings import KernelSettings

__version__ = "0.1.0"
__all__ = [
    "cast",
    "CastContext",
    "DispatchGrid",
    "DispatchError",
    "Element",
    "ELEMENTS",
    "ElemCastError",
    "InvalidSettingsError",
    "KernelSettings",
    "UnsupportedElementError",
    "exact_workgroups",
    "get_element",
    "linear_index",
]
