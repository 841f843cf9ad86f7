# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD 3-Clause license found in the
# LICENSE file in the root directory of this source tree.

"""
ElemCast backends submodule.

A backend builds cast kernels for a device type: ``triton`` compiles the
Triton kernel for CUDA devices, ``reference`` runs the same invocation model
with torch on the CPU.
"""

from typing import Optional, Union

import torch

from .base import Backend
from .reference import ReferenceBackend
from .triton import is_interpreted, TritonBackend

__all__ = [
    "Backend",
    "ReferenceBackend",
    "TritonBackend",
    "BACKENDS",
    "get_backend",
    "default_backend",
    "is_interpreted",
]

BACKENDS = {
    "reference": ReferenceBackend,
    "triton": TritonBackend,
}


def get_backend(name: str) -> Backend:
    if name not in BACKENDS:
        raise ValueError(f"Unknown backend: {name}")
    return BACKENDS[name]()


def default_backend(device: Optional[Union[str, torch.device]] = None) -> Backend:
    """Backend matching ``device``; triton when CUDA is usable and no device is given."""
    if device is None:
        return TritonBackend() if torch.cuda.is_available() else ReferenceBackend()
    if torch.device(device).type == "cuda":
        return TritonBackend()
    return ReferenceBackend()
