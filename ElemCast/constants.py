# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD 3-Clause license found in the
# LICENSE file in the root directory of this source tree.

# default block shape, one 32x32 worker group per program
DEFAULT_WORKGROUP_SIZE = 32

# CUDA launch limits on the number of programs per grid axis
MAX_GROUPS_X = 2**31 - 1
MAX_GROUPS_Y = 65535

# element pairs checked by the CLI when --pairs is not given
DEFAULT_PAIRS = (
    ("f32", "f32"),
    ("f32", "i32"),
    ("i32", "f32"),
    ("f32", "f16"),
    ("f16", "f32"),
    ("f32", "bf16"),
    ("i64", "i32"),
    ("i32", "i64"),
    ("f64", "f32"),
    ("u8", "f32"),
)

DEFAULT_NUM_ELEMS = 2**20
