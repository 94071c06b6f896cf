# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

from relpub.release.manifests.manifest import (
    ArtifactEntry,
    ChannelEntry,
    Manifest,
    format_build_time,
    parse_manifest,
    serialize_manifest,
)
from relpub.release.manifests.merger import (
    ReleaseRecord,
    ensure_channel,
    ensure_path,
    find_entry,
    merge_release,
)

__all__ = [
    "ArtifactEntry",
    "ChannelEntry",
    "Manifest",
    "ReleaseRecord",
    "ensure_channel",
    "ensure_path",
    "find_entry",
    "format_build_time",
    "merge_release",
    "parse_manifest",
    "serialize_manifest",
]
