from __future__ import annotations

from docsnip.models.cache import CacheEntry
from docsnip.models.request import (
    FileUrl,
    InclusionRequest,
    LocalPath,
    RemoteUrl,
    SourceLocator,
)

__all__ = [
    # request
    "InclusionRequest",
    "SourceLocator",
    "LocalPath",
    "RemoteUrl",
    "FileUrl",
    # cache
    "CacheEntry",
]
