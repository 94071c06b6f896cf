# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Release publishing for relpub.

Content addressing, manifest merging, the object storage collaborator and the
publish/verify operations that tie them together. Configuration and the CLI
live elsewhere; nothing in here reads environment variables.
"""
