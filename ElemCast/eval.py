# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD 3-Clause license found in the
# LICENSE file in the root directory of this source tree.

import logging
import math
import time
import traceback
from dataclasses import dataclass
from typing import Optional

import torch

from .backends import Backend
from .ops import cast, get_context
from .settings import KernelSettings
from .utils import compute_errors, make_input

logger = logging.getLogger(__name__)


@dataclass
class CorrectnessTestResult:
    pair: str
    num_elems: int
    has_correct_output: bool = False
    error_msg: str = ""
    error_type: str = ""
    traceback: str = ""
    max_abs_error: float = -math.inf
    num_mismatches: int = -1
    test_type: str = "correctness"


@dataclass
class PerformanceTestResult:
    pair: str
    num_elems: int
    speedup: Optional[float]
    benchmark_time_ms: Optional[float]
    reference_time_ms: Optional[float]
    error_msg: str = ""
    successfully_ran: bool = False
    test_type: str = "performance"


try:
    if torch.cuda.is_available():
        import triton.testing

        TRITON_AVAILABLE = True
    else:
        TRITON_AVAILABLE = False
except ImportError:
    TRITON_AVAILABLE = False


def pair_name(settings: KernelSettings) -> str:
    return f"{settings.input_elem.name}:{settings.output_elem.name}"


def _workgroup(settings: KernelSettings):
    return (settings.workgroup_size_x, settings.workgroup_size_y)


def _device(backend: Backend) -> torch.device:
    return torch.device(backend.device_type)


def eval_correctness(
    settings: KernelSettings, backend: Backend, num_elems: int, seed: int = 0
) -> CorrectnessTestResult:
    """Cast a deterministic input through ``backend`` and compare with ``Tensor.to``."""
    result = CorrectnessTestResult(pair=pair_name(settings), num_elems=num_elems)
    try:
        x = make_input(
            settings.input_elem,
            num_elems,
            device=_device(backend),
            seed=seed,
            target=settings.output_elem,
        )
        ref = x.to(settings.output_elem.dtype)
        res = cast(x, settings.output_elem, workgroup_size=_workgroup(settings), backend=backend)

        if res.dtype != ref.dtype or res.shape != ref.shape:
            raise ValueError(
                f"Expected {ref.dtype}{tuple(ref.shape)}, got {res.dtype}{tuple(res.shape)}"
            )
        abs_error, num_mismatches = compute_errors(ref, res)
        result.max_abs_error = abs_error
        result.num_mismatches = num_mismatches
        # a cast is exact: every element must equal the native cast, NaNs included
        result.has_correct_output = num_mismatches == 0
        if not result.has_correct_output:
            result.error_msg = (
                f"{num_mismatches} of {num_elems} elements differ from the native cast"
            )
    except Exception as e:
        logger.warning(f"Correctness check failed for {settings}: {e}")
        result.error_msg = str(e)
        result.error_type = type(e).__name__
        result.traceback = traceback.format_exc()
    return result


def cpu_bench(fn, num_runs=100):
    """Simple CPU benchmarking using time.perf_counter."""

    for _ in range(10):
        fn()

    start = time.perf_counter()
    for _ in range(num_runs):
        fn()
    return (time.perf_counter() - start) / num_runs * 1000


def eval_performance(
    settings: KernelSettings, backend: Backend, num_elems: int, seed: int = 0
) -> PerformanceTestResult:
    """Time the cast kernel against ``Tensor.to`` on the backend's device."""
    if TRITON_AVAILABLE and backend.device_type == "cuda":
        bench_fn = lambda fn: triton.testing.do_bench(fn, warmup=25, rep=100)
    else:
        bench_fn = cpu_bench

    base_time = None
    try:
        x = make_input(
            settings.input_elem,
            num_elems,
            device=_device(backend),
            seed=seed,
            target=settings.output_elem,
        )
        out_dtype = settings.output_elem.dtype
        base_time = bench_fn(lambda: x.to(out_dtype))

        context = get_context(x.device, backend)
        kernel = context.compile_static(settings)
        workgroup = _workgroup(settings)
        # first launch compiles
        cast(x, settings.output_elem, workgroup_size=workgroup, backend=backend)
        if torch.cuda.is_available():
            torch.cuda.synchronize()
        logger.debug(f"Benchmarking {kernel!r} over {num_elems} elements")
        test_time = bench_fn(
            lambda: cast(x, settings.output_elem, workgroup_size=workgroup, backend=backend)
        )
        return PerformanceTestResult(
            pair=pair_name(settings),
            num_elems=num_elems,
            speedup=base_time / test_time,
            benchmark_time_ms=test_time,
            reference_time_ms=base_time,
            successfully_ran=True,
        )
    except Exception as e:
        logger.warning(f"Benchmark failed for {settings}: {e}")
        return PerformanceTestResult(
            pair=pair_name(settings),
            num_elems=num_elems,
            speedup=None,
            benchmark_time_ms=None,
            reference_time_ms=base_time,
            error_msg=traceback.format_exc(),
        )
