# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD 3-Clause license found in the
# LICENSE file in the root directory of this source tree.

import logging
from typing import Dict, Optional, Tuple, Union

import torch

from .backends import Backend, default_backend, get_backend
from .constants import DEFAULT_WORKGROUP_SIZE
from .context import CastContext
from .dispatch import exact_workgroups, padded_length
from .elements import Element, get_element
from .settings import KernelSettings

logger = logging.getLogger(__name__)

# one context per (device type, device index, backend) so compiled kernels are reused
_contexts: Dict[Tuple[str, Optional[int], str], CastContext] = {}


def get_context(device: torch.device, backend: Optional[Union[str, Backend]] = None) -> CastContext:
    if backend is None:
        backend = default_backend(device)
    elif isinstance(backend, str):
        backend = get_backend(backend)
    key = (device.type, device.index, backend.name)
    if key not in _contexts:
        _contexts[key] = CastContext(device, backend)
    return _contexts[key]


def clear_contexts() -> None:
    _contexts.clear()


def cast(
    tensor: torch.Tensor,
    dtype: Union[str, torch.dtype, Element],
    workgroup_size: Union[int, Tuple[int, int]] = DEFAULT_WORKGROUP_SIZE,
    backend: Optional[Union[str, Backend]] = None,
) -> torch.Tensor:
    """
    Element-wise cast of ``tensor`` to ``dtype`` through the cast kernel.

    Args:
        tensor: Input tensor of any shape. It is read through a contiguous copy.
        dtype: Target element type, as a name (``"i32"``), torch dtype or Element.
        workgroup_size: Block shape baked into the kernel, an int or (x, y).
        backend: ``"triton"``, ``"reference"``, a Backend, or None to pick by device.

    Returns:
        A new tensor with the input's shape holding ``(dtype)(tensor)``.
    """
    settings = KernelSettings.create(tensor.dtype, get_element(dtype), workgroup_size)
    out_dtype = settings.output_elem.dtype

    num_elems = tensor.numel()
    if num_elems == 0:
        return torch.empty(tensor.shape, dtype=out_dtype, device=tensor.device)

    context = get_context(tensor.device, backend)
    kernel = context.compile_static(settings)

    flat = tensor.contiguous().reshape(-1)
    buffer_len = padded_length(num_elems, settings)
    if buffer_len != num_elems:
        # stage into whole worker groups; the kernel has no tail mask
        logger.debug(f"Padding {num_elems} elements to {buffer_len} for {settings}")
        staged = torch.zeros(buffer_len, dtype=flat.dtype, device=flat.device)
        staged[:num_elems] = flat
        flat = staged

    output = context.create_buffer(buffer_len, settings.output_elem)
    grid = exact_workgroups(buffer_len, settings)
    context.execute(grid, kernel, flat, output)

    return output[:num_elems].reshape(tensor.shape)
