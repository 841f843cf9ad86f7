# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD 3-Clause license found in the
# LICENSE file in the root directory of this source tree.

###############################################################################
# Triton element-wise cast kernel
#
# One program instance is one worker group of
# WORKGROUP_SIZE_X x WORKGROUP_SIZE_Y workers laid out as a 2-D tile of lanes.
# Each worker derives its linear index from its global (x, y) coordinate:
#
#     id = worker_y * (groups_x * WORKGROUP_SIZE_X) + worker_x
#
# and writes output[id] = OUTPUT_ELEM(input[id]).  There is no mask: the grid
# must cover the buffers exactly.
###############################################################################

import logging

import torch
import triton
import triton.language as tl

from ..dispatch import DispatchGrid
from ..settings import KernelSettings

logger = logging.getLogger(__name__)


@triton.jit
def _cast_kernel(
    input_ptr,
    output_ptr,
    OUTPUT_ELEM: tl.constexpr,
    WORKGROUP_SIZE_X: tl.constexpr,
    WORKGROUP_SIZE_Y: tl.constexpr,
):
    # 64-bit indices; buffers may hold 2**31 elements or more
    groups_x = tl.num_programs(0).to(tl.int64)
    group_x = tl.program_id(0).to(tl.int64)
    group_y = tl.program_id(1).to(tl.int64)

    # global coordinates of every worker in this group
    worker_x = group_x * WORKGROUP_SIZE_X + tl.arange(0, WORKGROUP_SIZE_X)[None, :]
    worker_y = group_y * WORKGROUP_SIZE_Y + tl.arange(0, WORKGROUP_SIZE_Y)[:, None]

    linear_id = worker_y * (groups_x * WORKGROUP_SIZE_X) + worker_x

    value = tl.load(input_ptr + linear_id)
    tl.store(output_ptr + linear_id, value.to(OUTPUT_ELEM))


class CastKernel:
    """
    A cast kernel specialized for one KernelSettings instance.

    The element types and the block shape are passed as constexprs, so Triton
    compiles one binary per settings on first launch.
    """

    def __init__(self, settings: KernelSettings):
        self.settings = settings
        self.num_launches = 0

    @property
    def name(self) -> str:
        return self.settings.id()

    def launch(self, grid: DispatchGrid, input: torch.Tensor, output: torch.Tensor) -> None:
        settings = self.settings
        if self.num_launches == 0:
            logger.debug(f"Compiling {settings} for grid {grid.as_tuple()}")
        _cast_kernel[grid.as_tuple()](
            input,
            output,
            OUTPUT_ELEM=settings.output_elem.triton_dtype,
            WORKGROUP_SIZE_X=settings.workgroup_size_x,
            WORKGROUP_SIZE_Y=settings.workgroup_size_y,
        )
        self.num_launches += 1

    def __call__(self, grid: DispatchGrid, input: torch.Tensor, output: torch.Tensor) -> None:
        self.launch(grid, input, output)

    def __repr__(self):
        return f"CastKernel({self.settings})"
