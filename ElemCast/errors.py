# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD 3-Clause license found in the
# LICENSE file in the root directory of this source tree.


class ElemCastError(Exception):
    """
    Base class for host-side errors raised while preparing or dispatching
    a cast kernel. The kernel itself never raises.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnsupportedElementError(ElemCastError, TypeError):
    """Raised when a scalar type has no registered element."""


class InvalidSettingsError(ElemCastError, ValueError):
    """Raised when build-time kernel settings cannot be compiled."""


class DispatchError(ElemCastError, ValueError):
    """
    Raised when a launch grid does not match the buffers it is dispatched
    over, or exceeds the device grid limits.
    """
