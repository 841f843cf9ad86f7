# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD 3-Clause license found in the
# LICENSE file in the root directory of this source tree.

import os

import torch

# without a GPU, Triton kernels run through the CPU interpreter; this must be
# set before any @triton.jit function is created
if not torch.cuda.is_available():
    os.environ.setdefault("TRITON_INTERPRET", "1")
