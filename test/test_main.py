# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD 3-Clause license found in the
# LICENSE file in the root directory of this source tree.

import json

from click.testing import CliRunner

from ElemCast.constants import DEFAULT_WORKGROUP_SIZE
from ElemCast.scripts.main import cli


class TestCli:
    def _run(self, *args):
        runner = CliRunner()
        return runner.invoke(
            cli,
            ["--backend", "reference", "--num-elems", "500", "--skip-perf", *args],
        )

    def test_pairs_pass(self):
        result = self._run("--pairs", "f32:i32,i32:f32,f32:f16", "--workgroup-size", "8x4")
        assert result.exit_code == 0, result.output
        assert "correctness score (mean pass rate over all pairs): 1.00" in result.output

    def test_default_pairs(self):
        result = self._run()
        assert result.exit_code == 0, result.output

    def test_unsupported_pairs_are_skipped(self):
        result = self._run("--pairs", "f32:u32,f32:i32")
        assert result.exit_code == 0, result.output

    def test_nothing_checked(self):
        result = self._run("--pairs", "f32:u32")
        assert result.exit_code == 1
        assert "No pairs were checked" in result.output

    def test_unknown_element(self):
        result = self._run("--pairs", "f32:q7")
        assert result.exit_code == 2

    def test_bad_workgroup_size(self):
        result = self._run("--workgroup-size", "3x3")
        assert result.exit_code == 2

    def test_with_performance(self):
        runner = CliRunner()
        result = runner.invoke(
            cli,
            ["--backend", "reference", "--num-elems", "128", "--pairs", "f32:i32", "--workgroup-size", "4"],
        )
        assert result.exit_code == 0, result.output
        assert "performance score" in result.output

    def test_output_path(self, tmp_path):
        out = tmp_path / "results"
        result = self._run("--pairs", "f32:i32", "--output-path", str(out))
        assert result.exit_code == 0, result.output
        with open(out / "full_results.json") as f:
            full = json.load(f)
        assert full["results"][0]["pair"] == "f32:i32"
        assert (out / "pair_summary.csv").exists()

    def test_default_workgroup_size_follows_constant(self):
        option = next(param for param in cli.params if param.name == "workgroup_size")
        assert option.default == f"{DEFAULT_WORKGROUP_SIZE}x{DEFAULT_WORKGROUP_SIZE}"
