from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class LocalPath(BaseModel):
    """A path relative to the site source root."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["local"] = "local"
    path: str

    def describe(self) -> str:
        return self.path


class RemoteUrl(BaseModel):
    """An absolute http(s) URL."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["remote"] = "remote"
    url: str

    def describe(self) -> str:
        return self.url


class FileUrl(BaseModel):
    """A ``file://`` URL, stored with the scheme stripped and forward slashes."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["file"] = "file"
    path: str

    def describe(self) -> str:
        return self.path


SourceLocator = Annotated[LocalPath | RemoteUrl | FileUrl, Field(discriminator="kind")]


class InclusionRequest(BaseModel):
    """A parsed ``include_file`` tag. Built once per tag render, never mutated."""

    model_config = ConfigDict(frozen=True)

    source: SourceLocator
    params: dict[str, str] = Field(default_factory=dict)

    @property
    def snippet(self) -> str | None:
        return self.params.get("snippet")

    @property
    def syntax(self) -> str | None:
        return self.params.get("syntax")

    @property
    def indent(self) -> int:
        return int(self.params.get("indent", "0"))
