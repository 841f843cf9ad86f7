# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD 3-Clause license found in the
# LICENSE file in the root directory of this source tree.

from ..settings import KernelSettings


class Backend:
    """
    A source of cast kernels.

    ``settings in backend`` tells whether the backend can build a kernel for
    the settings and ``backend[settings]`` builds it.
    """

    device_type = "cpu"

    def __init__(self, name):
        self.name = name

    @classmethod
    def is_available(cls) -> bool:
        return True

    def __contains__(self, settings: KernelSettings) -> bool:
        raise NotImplementedError

    def __getitem__(self, settings: KernelSettings):
        raise NotImplementedError

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r})"
