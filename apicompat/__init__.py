# Copyright Red Hat
#
# apicompat/__init__.py - API compatibility package initialisation
#
# This file is part of the apicompat project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Apicompat top-level package.
"""
from ._apicompat import *  # noqa: F401, F403
from ._apicompat import __all__  # noqa: F401

__version__ = "0.1.0"
