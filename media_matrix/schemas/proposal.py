"""
Proposal model - a media-buy proposal and its ordered list of scored versions.

The category is chosen once; after the first version exists it can no longer
change, because every stored version was scored against that category's
criteria and weights. Each questionnaire submission appends a new version.
"""

import uuid
from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from media_matrix.errors import ProposalStateError
from media_matrix.schemas.enums import ProposalCategory
from media_matrix.schemas.results import ScoredVersion


def _new_proposal_id() -> str:
    return f"prop_{uuid.uuid4().hex[:12]}"


class Proposal(BaseModel):
    """Media-buy proposal under evaluation."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(default_factory=_new_proposal_id)
    name: str
    vehicle: str = ""
    investment: float = Field(0.0, ge=0)
    city: str = ""
    region: str = ""
    proposal_date: Optional[date] = None
    campaign_period: str = ""
    category: Optional[ProposalCategory] = None
    social_channels: list[str] = Field(default_factory=list)
    versions: list[ScoredVersion] = Field(default_factory=list)
    current_version: int = Field(0, description="1-based pointer into versions; 0 when none")

    @field_validator("category", mode="before")
    @classmethod
    def _parse_category(cls, value):
        if value is None or value == "":
            return None
        return ProposalCategory.parse(value)

    @model_validator(mode="after")
    def _clamp_current_version(self) -> "Proposal":
        if not self.versions:
            self.current_version = 0
        elif not 1 <= self.current_version <= len(self.versions):
            self.current_version = len(self.versions)
        return self

    # ------------------------------------------------------------------
    # Category
    # ------------------------------------------------------------------

    def assign_category(self, category) -> ProposalCategory:
        """Set the category; only allowed until the first version is scored."""
        parsed = ProposalCategory.parse(category)
        if self.versions and parsed != self.category:
            raise ProposalStateError(
                f"Proposal {self.id} already has {len(self.versions)} scored version(s); "
                f"category cannot change from {self.category} to {parsed}"
            )
        self.category = parsed
        return parsed

    # ------------------------------------------------------------------
    # Versions
    # ------------------------------------------------------------------

    def append_version(self, version: ScoredVersion) -> None:
        expected = len(self.versions) + 1
        if version.version_number != expected:
            raise ProposalStateError(f"Expected version number {expected}, got {version.version_number}")
        self.versions.append(version)
        self.current_version = version.version_number

    def get_version(self, version_number: int) -> ScoredVersion:
        if not 1 <= version_number <= len(self.versions):
            raise ProposalStateError(
                f"Proposal {self.id} has no version {version_number} (has {len(self.versions)})"
            )
        return self.versions[version_number - 1]

    def select_version(self, version_number: int) -> ScoredVersion:
        """Point the proposal at an existing version for display/export."""
        version = self.get_version(version_number)
        self.current_version = version_number
        return version

    def replace_version(self, version: ScoredVersion) -> None:
        """Swap in an updated copy of an existing version (same number)."""
        self.get_version(version.version_number)
        self.versions[version.version_number - 1] = version

    def active_version(self) -> Optional[ScoredVersion]:
        if not self.versions or self.current_version < 1:
            return None
        return self.versions[self.current_version - 1]

    def cost_per_score(self) -> Optional[float]:
        """Investment per score point of the active version (None if unscored)."""
        version = self.active_version()
        if version is None or version.total_score <= 0:
            return None
        return self.investment / version.total_score
