"""Settings schema definitions using Pydantic.

This module defines the validated configuration contract for the toolkit.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from utils import APP_NAME, DEFAULT_OUTPUT_DIR


class RetentionOptions(BaseModel):
    """Rules for one retention pass over the render ledger."""

    keep_days: float = Field(
        default=30, ge=0, description="Keep every render newer than this many days"
    )
    keep_successful: int = Field(
        default=50, ge=0, description="Keep up to this many successful renders regardless of age"
    )
    delete_failed: bool = Field(
        default=True, description="Whether old failed renders are removed"
    )

    model_config = ConfigDict(frozen=True, extra="forbid")


class ToolkitSettings(BaseModel):
    """Complete toolkit configuration.

    Once validated, settings are read-only.
    """

    output_dir: str = Field(default=DEFAULT_OUTPUT_DIR, description="Render output directory")
    project_name: str = Field(default=APP_NAME, min_length=1, description="Project name in the ledger")
    max_history: int = Field(
        default=100, ge=1, le=10000, description="Maximum render entries kept in the ledger"
    )
    lock_timeout: float = Field(
        default=10.0, gt=0, description="Seconds to wait for the ledger lock"
    )
    stale_lock_seconds: float = Field(
        default=300.0, gt=0, description="Age after which a leftover ledger lock is broken"
    )
    fetch_timeout: float = Field(
        default=10.0, gt=0, description="Timeout in seconds for remote CSV fetches"
    )
    retention: RetentionOptions = Field(default_factory=RetentionOptions)

    @field_validator("output_dir", "project_name")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject blank strings."""
        if not v or not v.strip():
            raise ValueError("value cannot be empty")
        return v.strip()

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",  # Reject unknown keys
    )
