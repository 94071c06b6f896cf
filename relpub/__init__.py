# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
relpub: publish build artifacts to content-addressed object storage and
keep the shared release manifest in step.
"""

__version__ = "0.1.0"
