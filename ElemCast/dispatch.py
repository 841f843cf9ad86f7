# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD 3-Clause license found in the
# LICENSE file in the root directory of this source tree.

"""
Launch grid sizing for the cast kernel.

The kernel trusts its grid: every invocation writes the slot at its linear
index with no bounds check. Sizing and validating the grid is the caller's job
and lives here.
"""

import logging
import math
from dataclasses import dataclass
from typing import Tuple

from .constants import MAX_GROUPS_X, MAX_GROUPS_Y
from .errors import DispatchError
from .settings import KernelSettings

logger = logging.getLogger(__name__)


def linear_index(worker_x: int, worker_y: int, groups_x: int, block_width: int) -> int:
    """Flattened buffer position written by the worker at global (x, y)."""
    return worker_y * (groups_x * block_width) + worker_x


@dataclass(frozen=True)
class DispatchGrid:
    groups_x: int
    groups_y: int = 1

    @property
    def num_groups(self) -> int:
        return self.groups_x * self.groups_y

    def num_invocations(self, settings: KernelSettings) -> int:
        return self.num_groups * settings.block_size

    def as_tuple(self) -> Tuple[int, int]:
        return (self.groups_x, self.groups_y)


def exact_workgroups(num_elems: int, settings: KernelSettings) -> DispatchGrid:
    """
    Grid whose invocation count equals ``num_elems`` exactly.

    The group count is split into the most square (x, y) factor pair with
    x >= y so that the y axis stays under the device limit.

    Raises:
        DispatchError: if ``num_elems`` is not a positive multiple of the block size.
    """
    block_size = settings.block_size
    if num_elems <= 0:
        raise DispatchError(f"Cannot dispatch over {num_elems} elements")
    if num_elems % block_size != 0:
        raise DispatchError(
            f"{num_elems} elements is not a whole number of "
            f"{settings.workgroup_size_x}x{settings.workgroup_size_y} worker groups"
        )

    num_groups = num_elems // block_size
    groups_y = 1
    for candidate in range(math.isqrt(num_groups), 0, -1):
        if num_groups % candidate == 0:
            groups_y = candidate
            break
    grid = DispatchGrid(num_groups // groups_y, groups_y)
    logger.debug(f"Exact grid {grid.as_tuple()} for {num_elems} elements of {settings}")
    return grid


def elemwise_workgroup(num_elems: int, settings: KernelSettings) -> DispatchGrid:
    """
    Square-ish grid covering at least ``num_elems`` invocations.

    The result may over-provision; only use it with padded buffers.
    """
    num_groups = max(1, math.ceil(num_elems / settings.block_size))
    groups_x = math.ceil(math.sqrt(num_groups))
    groups_y = math.ceil(num_groups / groups_x)
    return DispatchGrid(groups_x, groups_y)


def padded_length(num_elems: int, settings: KernelSettings) -> int:
    """Smallest whole number of worker groups holding ``num_elems`` elements."""
    block_size = settings.block_size
    return max(1, math.ceil(num_elems / block_size)) * block_size


def check_grid(grid: DispatchGrid, settings: KernelSettings, num_elems: int) -> None:
    """
    Launch-time validation done by the hosting context.

    Raises:
        DispatchError: if the grid does not cover ``num_elems`` exactly or
            exceeds the per-axis group limits.
    """
    if grid.groups_x <= 0 or grid.groups_y <= 0:
        raise DispatchError(f"Grid {grid.as_tuple()} has an empty axis")
    if grid.groups_x > MAX_GROUPS_X or grid.groups_y > MAX_GROUPS_Y:
        raise DispatchError(
            f"Grid {grid.as_tuple()} exceeds the limits ({MAX_GROUPS_X}, {MAX_GROUPS_Y})"
        )
    num_invocations = grid.num_invocations(settings)
    if num_invocations != num_elems:
        raise DispatchError(
            f"Grid {grid.as_tuple()} dispatches {num_invocations} invocations "
            f"over a buffer of {num_elems} elements"
        )
