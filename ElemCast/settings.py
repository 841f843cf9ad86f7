# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD 3-Clause license found in the
# LICENSE file in the root directory of this source tree.

from dataclasses import dataclass
from typing import Tuple, Union

import torch

from .constants import DEFAULT_WORKGROUP_SIZE
from .elements import Element, get_element
from .errors import InvalidSettingsError


def _is_power_of_two(value: int) -> bool:
    return value > 0 and (value & (value - 1)) == 0


@dataclass(frozen=True)
class KernelSettings:
    """
    Build-time parameters of one cast kernel instance.

    A compiled kernel serves exactly one (input_elem, output_elem, block shape)
    combination; settings are hashable and key the compiled kernel cache.
    """

    input_elem: Element
    output_elem: Element
    workgroup_size_x: int = DEFAULT_WORKGROUP_SIZE
    workgroup_size_y: int = DEFAULT_WORKGROUP_SIZE
    workgroup_size_z: int = 1

    def __post_init__(self):
        # resolve names and dtypes to registered elements
        object.__setattr__(self, "input_elem", get_element(self.input_elem))
        object.__setattr__(self, "output_elem", get_element(self.output_elem))

        for axis in ("x", "y"):
            size = getattr(self, f"workgroup_size_{axis}")
            if isinstance(size, bool) or not isinstance(size, int):
                raise InvalidSettingsError(
                    f"workgroup_size_{axis} must be an int, got {type(size).__name__}"
                )
            # each block dimension is a tl.arange extent
            if not _is_power_of_two(size):
                raise InvalidSettingsError(
                    f"workgroup_size_{axis} must be a positive power of two, got {size}"
                )
        if self.workgroup_size_z != 1:
            raise InvalidSettingsError(
                f"workgroup_size_z must be 1, got {self.workgroup_size_z}"
            )

    @classmethod
    def create(
        cls,
        input_elem: Union[str, torch.dtype, Element],
        output_elem: Union[str, torch.dtype, Element],
        workgroup_size: Union[int, Tuple[int, int]] = DEFAULT_WORKGROUP_SIZE,
    ) -> "KernelSettings":
        if isinstance(workgroup_size, int):
            workgroup_size = (workgroup_size, workgroup_size)
        size_x, size_y = workgroup_size
        return cls(input_elem, output_elem, size_x, size_y)

    @property
    def block_size(self) -> int:
        """Number of workers in one worker group."""
        return self.workgroup_size_x * self.workgroup_size_y * self.workgroup_size_z

    @property
    def is_identity(self) -> bool:
        return self.input_elem == self.output_elem

    def id(self) -> str:
        return (
            f"cast_{self.input_elem.name}_{self.output_elem.name}"
            f"_{self.workgroup_size_x}x{self.workgroup_size_y}x{self.workgroup_size_z}"
        )

    def __str__(self):
        return self.id()


def parse_workgroup_size(value: str) -> Tuple[int, int]:
    """Parse ``"32x8"`` or ``"16"`` into an (x, y) block shape."""
    parts = value.lower().split("x")
    try:
        sizes = [int(part) for part in parts]
    except ValueError:
        raise InvalidSettingsError(f"Invalid workgroup size: {value}")
    if len(sizes) == 1:
        return sizes[0], sizes[0]
    if len(sizes) == 2:
        return sizes[0], sizes[1]
    raise InvalidSettingsError(f"Invalid workgroup size: {value}")
