"""
Domain models for shell-setup.

All models are re-exported here for convenient access:

    from shellsetup.core.models import Action, Receipt, MergeResult, Manifest
"""

from shellsetup.core.models.action import Action, Receipt
from shellsetup.core.models.manifest import (
    BlockSpec,
    DirectorySpec,
    FileSpec,
    LineSpec,
    Manifest,
    PackageSpec,
    SectionSpec,
    ToolSpec,
)
from shellsetup.core.models.merge import FormatTag, MergeAction, MergeResult

__all__ = [
    # action.py
    "Action",
    # manifest.py
    "BlockSpec",
    "DirectorySpec",
    "FileSpec",
    # merge.py
    "FormatTag",
    "LineSpec",
    "Manifest",
    "MergeAction",
    "MergeResult",
    "PackageSpec",
    "Receipt",
    "SectionSpec",
    "ToolSpec",
]
