# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD 3-Clause license found in the
# LICENSE file in the root directory of this source tree.

import logging
import os
import sys

import click
import torch

import ElemCast.backends as backends
from ElemCast.constants import DEFAULT_NUM_ELEMS, DEFAULT_PAIRS, DEFAULT_WORKGROUP_SIZE
from ElemCast.errors import ElemCastError
from ElemCast.eval import eval_correctness, eval_performance
from ElemCast.output import save_results
from ElemCast.settings import KernelSettings, parse_workgroup_size
from ElemCast.utils import parse_pairs

logger = logging.getLogger(__name__)


def setup_logging(log_level):
    """Configure logging with the specified level."""
    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {log_level}")

    logging.basicConfig(
        level=numeric_level,
        format="[%(asctime)s][%(levelname)s][%(filename)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


@click.command()
@click.option(
    "--log-level",
    default=os.getenv("LOG_LEVEL", "INFO"),
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Set the logging level",
)
@click.option(
    "--backend",
    default=None,
    type=click.Choice(sorted(backends.BACKENDS)),
    help="Which backend to run (default: triton when CUDA is available, else reference)",
)
@click.option(
    "--pairs",
    default=None,
    type=str,
    help="Comma-separated INPUT:OUTPUT element pairs, e.g. f32:i32,i32:f32",
)
@click.option(
    "--workgroup-size",
    default=f"{DEFAULT_WORKGROUP_SIZE}x{DEFAULT_WORKGROUP_SIZE}",
    type=str,
    help="Worker group shape baked into the kernel, XxY",
)
@click.option(
    "--num-elems",
    default=DEFAULT_NUM_ELEMS,
    type=int,
    help="Number of elements cast per check",
)
@click.option(
    "--skip-perf",
    is_flag=True,
    default=False,
    help="Only check correctness",
)
@click.option(
    "--output-path",
    default=None,
    type=str,
    help="Directory for JSON/CSV results (if not specified, no files are written)",
)
def cli(
    log_level,
    backend,
    pairs,
    workgroup_size,
    num_elems,
    skip_perf,
    output_path,
):
    setup_logging(log_level)

    if backend is None:
        backend = backends.default_backend()
    else:
        backend = backends.get_backend(backend)
    if not backend.is_available():
        raise click.UsageError(f"Backend {backend.name} is not available on this machine")

    try:
        size_x, size_y = parse_workgroup_size(workgroup_size)
        if pairs:
            element_pairs = parse_pairs(pairs)
        else:
            element_pairs = parse_pairs(",".join(f"{a}:{b}" for a, b in DEFAULT_PAIRS))
        all_settings = [KernelSettings(src, dst, size_x, size_y) for src, dst in element_pairs]
    except (ElemCastError, ValueError) as e:
        raise click.BadParameter(str(e))

    logger.info(
        f"Checking {len(all_settings)} pairs with the {backend.name} backend "
        f"({size_x}x{size_y} worker groups, {num_elems} elements)"
    )

    correctness_results = []
    performance_results = []
    for settings in all_settings:
        if settings not in backend:
            logger.warning(f"Skipping {settings}: not supported by {backend.name}")
            continue

        result = eval_correctness(settings, backend, num_elems)
        correctness_results.append(result)
        status = "ok" if result.has_correct_output else f"FAILED ({result.error_msg})"
        logger.info(f"{result.pair}: {status}")

        if not skip_perf:
            perf = eval_performance(settings, backend, num_elems)
            performance_results.append(perf)
            if perf.successfully_ran:
                logger.info(f"{perf.pair}: {perf.speedup:.2f}x vs Tensor.to")

    if not correctness_results:
        print("No pairs were checked")
        sys.exit(1)

    mean_correctness = torch.tensor(
        [result.has_correct_output for result in correctness_results]
    ).float().mean().item()
    print(f"correctness score (mean pass rate over all pairs): {mean_correctness:.2f}")

    # a failed benchmark counts as no speedup
    speedups = [
        perf.speedup if perf.successfully_ran else 1.0 for perf in performance_results
    ]
    if speedups:
        geomean_perf = torch.tensor(speedups).log().mean().exp().item()
        print(f"performance score (geomean speedup over all pairs): {geomean_perf:.2f}")

    if output_path:
        save_results(
            correctness_results,
            performance_results,
            output_path,
            command=" ".join(sys.argv),
        )
        print(f"Detailed results saved to: {output_path}")

    if mean_correctness < 1.0:
        sys.exit(1)


if __name__ == "__main__":
    cli()
