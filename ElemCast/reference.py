# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD 3-Clause license found in the
# LICENSE file in the root directory of this source tree.

"""
CPU reference for the cast kernel.

Runs the same invocation model as the Triton kernel with torch on the host:
every worker of every group computes its linear index and writes one output
slot. Used as the ``reference`` backend and as the oracle in tests.
"""

import torch

from .dispatch import DispatchGrid
from .settings import KernelSettings


def invocation_ids(settings: KernelSettings, grid: DispatchGrid) -> torch.Tensor:
    """
    Linear index computed by each invocation of ``grid``.

    Invocations are enumerated group by group (y then x), and within a group
    by local (y, x). The result has one entry per invocation.
    """
    size_x = settings.workgroup_size_x
    size_y = settings.workgroup_size_y

    group_y, group_x, local_y, local_x = torch.meshgrid(
        torch.arange(grid.groups_y, dtype=torch.int64),
        torch.arange(grid.groups_x, dtype=torch.int64),
        torch.arange(size_y, dtype=torch.int64),
        torch.arange(size_x, dtype=torch.int64),
        indexing="ij",
    )
    worker_x = group_x * size_x + local_x
    worker_y = group_y * size_y + local_y
    return (worker_y * (grid.groups_x * size_x) + worker_x).reshape(-1)


class ReferenceCastKernel:
    def __init__(self, settings: KernelSettings):
        self.settings = settings
        self.num_launches = 0

    @property
    def name(self) -> str:
        return self.settings.id()

    def launch(self, grid: DispatchGrid, input: torch.Tensor, output: torch.Tensor) -> None:
        ids = invocation_ids(self.settings, grid).to(input.device)
        # tensor indexing still raises on an overrun; the kernel itself does not check
        output[ids] = input[ids].to(self.settings.output_elem.dtype)
        self.num_launches += 1

    def __call__(self, grid: DispatchGrid, input: torch.Tensor, output: torch.Tensor) -> None:
        self.launch(grid, input, output)

    def __repr__(self):
        return f"ReferenceCastKernel({self.settings})"
