# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD 3-Clause license found in the
# LICENSE file in the root directory of this source tree.

import csv
import json
import logging
from collections import defaultdict
from dataclasses import asdict
from pathlib import Path
from typing import List, Optional, Union

import torch

from .eval import CorrectnessTestResult, PerformanceTestResult

logger = logging.getLogger(__name__)


def summarize_pairs(
    correctness_results: List[CorrectnessTestResult],
    performance_results: List[PerformanceTestResult],
) -> List[dict]:
    """One summary row per element pair, sorted by pair name."""
    by_pair = defaultdict(lambda: {"correctness": [], "performance": []})
    for result in correctness_results:
        by_pair[result.pair]["correctness"].append(result)
    for result in performance_results:
        by_pair[result.pair]["performance"].append(result)

    rows = []
    for pair in sorted(by_pair):
        correctness = by_pair[pair]["correctness"]
        speedups = [
            float(result.speedup)
            for result in by_pair[pair]["performance"]
            if result.successfully_ran and result.speedup
        ]
        passed = sum(1 for result in correctness if result.has_correct_output)
        errors = [result.max_abs_error for result in correctness if result.num_mismatches >= 0]
        rows.append(
            {
                "pair": pair,
                "total_tests": len(correctness),
                "passed_tests": passed,
                "failed_tests": len(correctness) - passed,
                "correctness_rate": passed / len(correctness) if correctness else 0.0,
                "geomean_speedup": (
                    torch.tensor(speedups).log().mean().exp().item() if speedups else 0.0
                ),
                "max_absolute_error": max(errors) if errors else 0.0,
            }
        )
    return rows


def save_results(
    correctness_results: List[CorrectnessTestResult],
    performance_results: List[PerformanceTestResult],
    output_path: Union[str, Path] = "elemcast_output",
    command: Optional[str] = None,
):
    """Save results of a harness run.

    Structure created:
        output_path/
        ├── full_results.json          # Every correctness and performance record
        ├── pair_summary.csv           # One row per element pair
        └── failed_pairs.json          # Records that failed or did not run
    """
    base_dir = Path(output_path)
    base_dir.mkdir(parents=True, exist_ok=True)

    all_results = [asdict(result) for result in correctness_results] + [
        asdict(result) for result in performance_results
    ]
    all_results.sort(key=lambda x: (x["pair"], x["test_type"]))

    full_log_path = base_dir / "full_results.json"
    with open(full_log_path, "w") as f:
        json.dump({"command": command, "results": all_results}, f, indent=2)
    logger.info(f"Full results saved to {full_log_path}")

    rows = summarize_pairs(correctness_results, performance_results)
    summary_csv_path = base_dir / "pair_summary.csv"
    if rows:
        with open(summary_csv_path, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
            writer.writeheader()
            for row in rows:
                writer.writerow(row)
        logger.info(f"Pair summary CSV saved to {summary_csv_path}")

    failed = [
        asdict(result) for result in correctness_results if not result.has_correct_output
    ] + [asdict(result) for result in performance_results if not result.successfully_ran]
    failed.sort(key=lambda x: (x["pair"], x["test_type"]))
    failed_path = base_dir / "failed_pairs.json"
    with open(failed_path, "w") as f:
        json.dump(failed, f, indent=2)
    logger.info(f"Failed pairs log saved to {failed_path}")

    return base_dir
