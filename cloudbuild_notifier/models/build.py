"""Cloud Build event models.

Mirrors the subset of the Cloud Build ``Build`` resource that notifications
use. Scheduled and source-triggered builds carry different subsets of these
fields, so everything except the lists is optional.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _CloudBuildModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class RepoSource(_CloudBuildModel):
    """Cloud Source Repositories location of the build source."""

    project_id: str | None = None
    repo_name: str | None = None
    branch_name: str | None = None


class Source(_CloudBuildModel):
    repo_source: RepoSource | None = None


class ResolvedRepoSource(_CloudBuildModel):
    """Exact revision the build ran against."""

    commit_sha: str | None = None
    tag_name: str | None = None


class SourceProvenance(_CloudBuildModel):
    resolved_repo_source: ResolvedRepoSource | None = None


class BuildEvent(_CloudBuildModel):
    """A Cloud Build build as published on the ``cloud-builds`` topic."""

    id: str | None = None
    status: str | None = None
    log_url: str | None = None
    start_time: str | None = None
    finish_time: str | None = None
    images: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    substitutions: dict[str, str] = Field(default_factory=dict)
    source: Source | None = None
    source_provenance: SourceProvenance | None = None

    @field_validator("images", "tags", mode="before")
    @classmethod
    def _none_as_empty_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("substitutions", mode="before")
    @classmethod
    def _none_as_empty_dict(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def repo_source(self) -> RepoSource:
        if self.source and self.source.repo_source:
            return self.source.repo_source
        return RepoSource()

    @property
    def resolved_repo_source(self) -> ResolvedRepoSource:
        provenance = self.source_provenance
        if provenance and provenance.resolved_repo_source:
            return provenance.resolved_repo_source
        return ResolvedRepoSource()

    @property
    def repo_project_id(self) -> str | None:
        return self.repo_source.project_id or None

    @property
    def repo_name(self) -> str | None:
        return self.repo_source.repo_name or self.substitutions.get("REPO_NAME") or None

    @property
    def branch_name(self) -> str | None:
        return self.repo_source.branch_name or self.substitutions.get("BRANCH_NAME") or None

    @property
    def commit_sha(self) -> str | None:
        return (
            self.resolved_repo_source.commit_sha
            or self.substitutions.get("COMMIT_SHA")
            or self.substitutions.get("REVISION_ID")
            or None
        )

    @property
    def tag_name(self) -> str | None:
        return self.resolved_repo_source.tag_name or None
