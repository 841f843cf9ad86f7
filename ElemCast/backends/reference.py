# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD 3-Clause license found in the
# LICENSE file in the root directory of this source tree.

from ..elements import U32
from ..reference import ReferenceCastKernel
from ..settings import KernelSettings
from .base import Backend


class ReferenceBackend(Backend):
    device_type = "cpu"

    def __init__(self) -> None:
        super().__init__("reference")

    def __contains__(self, settings: KernelSettings) -> bool:
        # torch ships only barebones uint32 kernels on CPU
        return U32 not in (settings.input_elem, settings.output_elem)

    def __getitem__(self, settings: KernelSettings) -> ReferenceCastKernel:
        if settings not in self:
            raise KeyError(f"{self.name} backend cannot build {settings}")
        return ReferenceCastKernel(settings)
