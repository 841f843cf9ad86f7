# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD 3-Clause license found in the
# LICENSE file in the root directory of this source tree.

import pytest
import torch

import ElemCast
from ElemCast.backends import is_interpreted, ReferenceBackend
from ElemCast.ops import cast, clear_contexts, get_context
from ElemCast.utils import make_input

HAS_CUDA = torch.cuda.is_available()
INTERPRETED = is_interpreted() and not HAS_CUDA
DEVICE = "cuda" if HAS_CUDA else "cpu"


@pytest.fixture(autouse=True)
def fresh_contexts():
    clear_contexts()
    yield
    clear_contexts()


class TestCastOnCpu:
    def test_float_to_int_truncates_toward_zero(self):
        x = torch.tensor([1.5, -1.5, 3.9], dtype=torch.float32)
        y = cast(x, "i32")
        assert y.dtype == torch.int32
        assert y.tolist() == [1, -1, 3]

    def test_int_to_float(self):
        y = cast(torch.tensor([5, -5], dtype=torch.int32), torch.float32)
        assert y.dtype == torch.float32
        assert y.tolist() == [5.0, -5.0]

    def test_identity(self):
        x = torch.randn(1000)
        y = cast(x, "f32")
        assert torch.equal(x, y)
        assert y.data_ptr() != x.data_ptr()

    def test_keeps_shape(self):
        x = torch.randn(3, 5, 7)
        y = cast(x, "f64", workgroup_size=(8, 4))
        assert y.shape == x.shape
        assert torch.equal(y, x.to(torch.float64))

    def test_non_contiguous_input(self):
        x = torch.arange(24, dtype=torch.int64).reshape(4, 6).t()
        y = cast(x, "f32", workgroup_size=4)
        assert torch.equal(y, x.to(torch.float32))

    def test_exact_multiple_needs_no_padding(self):
        x = torch.randn(64)
        assert torch.equal(cast(x, "f16", workgroup_size=(8, 8)), x.to(torch.float16))

    def test_empty(self):
        y = cast(torch.empty(0, 3), "i32")
        assert y.shape == (0, 3)
        assert y.dtype == torch.int32

    def test_scalar_tensor(self):
        y = cast(torch.tensor(2.75), "i64")
        assert y.shape == ()
        assert y.item() == 2

    @pytest.mark.parametrize(
        "src,dst",
        [("f32", "i32"), ("i32", "f32"), ("f32", "bf16"), ("i64", "i32"), ("u8", "f32"), ("f64", "i8")],
    )
    def test_matches_native_cast(self, src, dst):
        x = make_input(src, 3000, target=dst)
        y = cast(x, dst, workgroup_size=(16, 4))
        assert torch.equal(y, x.to(ElemCast.get_element(dst).dtype))

    def test_backend_by_name(self):
        y = cast(torch.ones(4), "i32", backend="reference")
        assert y.tolist() == [1, 1, 1, 1]

    @pytest.mark.skipif(INTERPRETED, reason="the interpreter runs triton on host tensors")
    def test_triton_backend_rejects_cpu_tensor(self):
        with pytest.raises(ValueError):
            cast(torch.ones(4), "i32", backend="triton")

    def test_unknown_dtype(self):
        with pytest.raises(ElemCast.UnsupportedElementError):
            cast(torch.ones(4), "f8")

    def test_bad_workgroup(self):
        with pytest.raises(ElemCast.InvalidSettingsError):
            cast(torch.ones(4), "i32", workgroup_size=(3, 3))


class TestContextReuse:
    def test_kernels_are_cached_across_calls(self):
        cast(torch.ones(10), "i32", workgroup_size=2)
        cast(torch.ones(20), "i32", workgroup_size=2)
        context = get_context(torch.device("cpu"))
        assert len(context.compiled_kernels) == 1
        (kernel,) = context.compiled_kernels.values()
        assert kernel.num_launches == 2

    def test_same_context_for_backend_instance(self):
        assert get_context(torch.device("cpu")) is get_context(
            torch.device("cpu"), ReferenceBackend()
        )


@pytest.mark.skipif(
    not (HAS_CUDA or INTERPRETED), reason="needs CUDA or TRITON_INTERPRET=1"
)
class TestCastWithTriton:
    def test_float_to_int_truncates_toward_zero(self):
        x = torch.tensor([1.5, -1.5, 3.9], device=DEVICE)
        y = cast(x, "i32", backend="triton")
        assert y.device.type == DEVICE
        assert y.cpu().tolist() == [1, -1, 3]

    def test_keeps_shape(self):
        x = torch.randn(17, 33, device=DEVICE)
        y = cast(x, "f16", workgroup_size=(16, 8), backend="triton")
        assert y.shape == x.shape
        assert torch.equal(y, x.to(torch.float16))

    def test_matches_reference_backend(self):
        x = make_input("f32", 5000, device=DEVICE, target="i16")
        y = cast(x, "i16", workgroup_size=(8, 4), backend="triton")
        expected = cast(x.cpu(), "i16", workgroup_size=(8, 4), backend="reference")
        assert torch.equal(y.cpu(), expected)

    @pytest.mark.skipif(not HAS_CUDA, reason="CUDA not available")
    def test_cuda_tensors_default_to_triton(self):
        cast(torch.ones(8, device="cuda"), "i32")
        context = get_context(torch.device("cuda", torch.cuda.current_device()))
        assert context.backend.name == "triton"
