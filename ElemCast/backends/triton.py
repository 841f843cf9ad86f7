# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD 3-Clause license found in the
# LICENSE file in the root directory of this source tree.

import os

import torch

from ..kernels.cast import CastKernel
from ..settings import KernelSettings
from .base import Backend


def is_interpreted() -> bool:
    """True when Triton runs kernels through its CPU interpreter."""
    return os.environ.get("TRITON_INTERPRET", "0") == "1"


class TritonBackend(Backend):
    device_type = "cuda"

    def __init__(self) -> None:
        super().__init__("triton")
        # the interpreter launches kernels on host tensors
        if is_interpreted() and not torch.cuda.is_available():
            self.device_type = "cpu"

    @classmethod
    def is_available(cls) -> bool:
        return torch.cuda.is_available() or is_interpreted()

    def __contains__(self, settings: KernelSettings) -> bool:
        return isinstance(settings, KernelSettings)

    def __getitem__(self, settings: KernelSettings) -> CastKernel:
        if settings not in self:
            raise KeyError(f"{self.name} backend cannot build {settings}")
        return CastKernel(settings)
