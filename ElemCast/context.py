# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD 3-Clause license found in the
# LICENSE file in the root directory of this source tree.

import logging
from typing import Dict, Optional, Union

import torch

from .backends import Backend, default_backend
from .dispatch import DispatchGrid, check_grid
from .elements import Element, get_element
from .errors import DispatchError, UnsupportedElementError
from .settings import KernelSettings

logger = logging.getLogger(__name__)


def _same_device(a: torch.device, b: torch.device) -> bool:
    if a.type != b.type:
        return False
    return a.index is None or b.index is None or a.index == b.index


class CastContext:
    """
    Owns a device, the backend that builds kernels for it, and the cache of
    compiled kernels keyed by their build-time settings.
    """

    def __init__(
        self,
        device: Union[str, torch.device, None] = None,
        backend: Optional[Backend] = None,
    ):
        if backend is None:
            backend = default_backend(device)
        if device is None:
            device = backend.device_type
        self.device = torch.device(device)
        self.backend = backend
        self.compiled_kernels: Dict[KernelSettings, object] = {}

        if self.device.type != backend.device_type:
            raise ValueError(
                f"{backend.name} backend runs on {backend.device_type}, not {self.device}"
            )

    def compile_static(self, settings: KernelSettings):
        """Kernel for ``settings``, built once per context."""
        kernel = self.compiled_kernels.get(settings)
        if kernel is not None:
            return kernel

        if settings not in self.backend:
            raise UnsupportedElementError(
                f"{self.backend.name} backend does not support {settings}"
            )
        kernel = self.backend[settings]
        self.compiled_kernels[settings] = kernel
        logger.info(f"Compiled {settings} with the {self.backend.name} backend")
        return kernel

    def create_buffer(self, num_elems: int, elem: Union[str, torch.dtype, Element]) -> torch.Tensor:
        """Uninitialized flat buffer of ``num_elems`` elements on the context device."""
        elem = get_element(elem)
        return torch.empty(num_elems, dtype=elem.dtype, device=self.device)

    def execute(
        self,
        grid: DispatchGrid,
        kernel,
        input: torch.Tensor,
        output: torch.Tensor,
    ) -> None:
        """
        Launch ``kernel`` over ``grid`` with input at binding 0 and output at binding 1.

        Raises:
            DispatchError: if the buffers or the grid do not match.
        """
        settings = kernel.settings
        if input.dim() != 1 or output.dim() != 1 or not (
            input.is_contiguous() and output.is_contiguous()
        ):
            raise DispatchError("Cast buffers must be flat and contiguous")
        if input.numel() != output.numel():
            raise DispatchError(
                f"Input has {input.numel()} elements but output has {output.numel()}"
            )
        if input.dtype != settings.input_elem.dtype or output.dtype != settings.output_elem.dtype:
            raise DispatchError(
                f"Buffers ({input.dtype}, {output.dtype}) do not match {settings}"
            )
        if not (_same_device(input.device, self.device) and _same_device(output.device, self.device)):
            raise DispatchError(f"Buffers must live on {self.device}")
        check_grid(grid, settings, input.numel())

        logger.debug(f"Launching {settings} over grid {grid.as_tuple()}")
        kernel.launch(grid, input, output)

    def __repr__(self):
        return f"CastContext(device={self.device}, backend={self.backend.name})"
