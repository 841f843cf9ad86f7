# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD 3-Clause license found in the
# LICENSE file in the root directory of this source tree.

"""
Scalar element types understood by the cast kernel.

Every element has a short kernel-facing name (``f32``, ``i32``, ...) and maps
to a torch dtype for host buffers and a Triton dtype for the compiled kernel.
"""

from dataclasses import dataclass, field
from typing import Dict, Sequence, Union

import torch
import triton.language as tl

from .errors import UnsupportedElementError


@dataclass(frozen=True)
class Element:
    name: str
    dtype: torch.dtype
    triton_dtype: tl.dtype = field(compare=False, repr=False)

    @property
    def itemsize(self) -> int:
        return torch.empty((), dtype=self.dtype).element_size()

    @property
    def is_floating_point(self) -> bool:
        return self.dtype.is_floating_point

    def as_bytes(self, values: Union[torch.Tensor, Sequence]) -> bytes:
        """Raw little-endian bytes of ``values`` stored as this element."""
        tensor = torch.as_tensor(values, dtype=self.dtype).detach().cpu().contiguous()
        return bytes(tensor.reshape(-1).view(torch.uint8).tolist())

    def from_bytes(self, data: bytes) -> torch.Tensor:
        if len(data) % self.itemsize != 0:
            raise ValueError(
                f"Buffer of {len(data)} bytes is not a whole number of {self.name} elements"
            )
        if len(data) == 0:
            return torch.empty(0, dtype=self.dtype)
        return torch.frombuffer(bytearray(data), dtype=self.dtype)

    def __str__(self):
        return self.name


F16 = Element("f16", torch.float16, tl.float16)
BF16 = Element("bf16", torch.bfloat16, tl.bfloat16)
F32 = Element("f32", torch.float32, tl.float32)
F64 = Element("f64", torch.float64, tl.float64)
I8 = Element("i8", torch.int8, tl.int8)
I16 = Element("i16", torch.int16, tl.int16)
I32 = Element("i32", torch.int32, tl.int32)
I64 = Element("i64", torch.int64, tl.int64)
U8 = Element("u8", torch.uint8, tl.uint8)
U32 = Element("u32", torch.uint32, tl.uint32)

ELEMENTS: Dict[str, Element] = {
    elem.name: elem for elem in (F16, BF16, F32, F64, I8, I16, I32, I64, U8, U32)
}

_BY_DTYPE: Dict[torch.dtype, Element] = {elem.dtype: elem for elem in ELEMENTS.values()}

# accepted spellings beyond the short names
_ALIASES = {
    "float16": "f16",
    "half": "f16",
    "bfloat16": "bf16",
    "float32": "f32",
    "float": "f32",
    "float64": "f64",
    "double": "f64",
    "int8": "i8",
    "int16": "i16",
    "int32": "i32",
    "int": "i32",
    "int64": "i64",
    "long": "i64",
    "uint8": "u8",
    "uint32": "u32",
}


def get_element(elem: Union[str, torch.dtype, Element]) -> Element:
    """
    Resolve a name, torch dtype or Element into a registered Element.

    Raises:
        UnsupportedElementError: if the type has no registered element.
    """
    if isinstance(elem, Element):
        return elem
    if isinstance(elem, torch.dtype):
        if elem not in _BY_DTYPE:
            raise UnsupportedElementError(f"Unsupported element dtype: {elem}")
        return _BY_DTYPE[elem]
    if isinstance(elem, str):
        name = elem.strip().lower()
        if name.startswith("torch."):
            name = name[len("torch.") :]
        name = _ALIASES.get(name, name)
        if name not in ELEMENTS:
            raise UnsupportedElementError(f"Unknown element type: {elem}")
        return ELEMENTS[name]
    raise UnsupportedElementError(f"Cannot interpret {elem!r} as an element type")
