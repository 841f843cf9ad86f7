# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD 3-Clause license found in the
# LICENSE file in the root directory of this source tree.

import pytest
import torch

from ElemCast.dispatch import DispatchGrid, exact_workgroups, linear_index
from ElemCast.reference import invocation_ids, ReferenceCastKernel
from ElemCast.settings import KernelSettings


class TestInvocationIds:
    def test_one_id_per_invocation(self):
        settings = KernelSettings("f32", "i32", 4, 2)
        grid = DispatchGrid(3, 2)
        assert invocation_ids(settings, grid).numel() == grid.num_invocations(settings)

    def test_matches_linear_index(self):
        settings = KernelSettings("f32", "i32", 4, 1)
        grid = DispatchGrid(2, 2)
        ids = invocation_ids(settings, grid).tolist()
        # group (x=0, y=1), local (1, 0) is the worker at global (1, 1)
        position = (1 * grid.groups_x + 0) * settings.block_size + 1
        assert ids[position] == linear_index(1, 1, grid.groups_x, settings.workgroup_size_x)
        assert ids[position] == 9

    @pytest.mark.parametrize(
        "block,num_elems",
        [((1, 1), 7), ((4, 2), 48), ((2, 8), 16 * 9), ((8, 8), 64 * 12), ((32, 32), 1024 * 6)],
    )
    def test_full_coverage_without_aliasing(self, block, num_elems):
        settings = KernelSettings("f32", "i32", *block)
        grid = exact_workgroups(num_elems, settings)
        ids = invocation_ids(settings, grid)
        assert ids.numel() == num_elems
        # every index in [0, L) written exactly once
        assert torch.equal(torch.bincount(ids, minlength=num_elems), torch.ones(num_elems, dtype=torch.int64))

    def test_rows_span_all_groups(self):
        settings = KernelSettings("f32", "i32", 2, 2)
        grid = DispatchGrid(3, 1)
        ids = invocation_ids(settings, grid).reshape(grid.groups_x, 2, 2)
        # second row of the first group starts after a full row of six workers
        assert ids[0].tolist() == [[0, 1], [6, 7]]
        assert ids[2].tolist() == [[4, 5], [10, 11]]


class TestReferenceCastKernel:
    def _run(self, settings, values):
        input = torch.tensor(values, dtype=settings.input_elem.dtype)
        output = torch.empty(input.numel(), dtype=settings.output_elem.dtype)
        grid = exact_workgroups(input.numel(), settings)
        ReferenceCastKernel(settings).launch(grid, input, output)
        return output

    def test_float_to_int_truncates(self):
        output = self._run(KernelSettings("f32", "i32", 1, 1), [1.5, -1.5, 3.9])
        assert output.dtype == torch.int32
        assert output.tolist() == [1, -1, 3]

    def test_int_to_float_widens(self):
        output = self._run(KernelSettings("i32", "f32", 2, 1), [5, -5])
        assert output.dtype == torch.float32
        assert output.tolist() == [5.0, -5.0]

    def test_identity(self):
        values = torch.randn(64, generator=torch.Generator().manual_seed(0)).tolist()
        output = self._run(KernelSettings("f32", "f32", 8, 8), values)
        assert torch.equal(output, torch.tensor(values, dtype=torch.float32))

    def test_matches_native_cast(self):
        settings = KernelSettings("f64", "f16", 4, 4)
        values = (torch.rand(16 * 5, dtype=torch.float64) * 200 - 100).tolist()
        output = self._run(settings, values)
        assert torch.equal(output, torch.tensor(values, dtype=torch.float64).to(torch.float16))

    def test_counts_launches(self):
        settings = KernelSettings("f32", "i32", 1, 1)
        kernel = ReferenceCastKernel(settings)
        input = torch.ones(3)
        output = torch.empty(3, dtype=torch.int32)
        kernel(DispatchGrid(3, 1), input, output)
        kernel(DispatchGrid(3, 1), input, output)
        assert kernel.num_launches == 2
        assert kernel.name == "cast_f32_i32_1x1x1"
