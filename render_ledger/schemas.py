"""Render ledger schemas.

This module defines the typed records kept in the render ledger and the input
contracts used to create them. Ledger records are serializable to the camelCase
JSON document stored on disk and tolerate unknown fields when read back.
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from numbers import Real
from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from utils import APP_VERSION, utc_now_iso

from .utils.constants import DEFAULT_MAX_HISTORY


class OutputFormat(str, Enum):
    """Container formats produced by the rendering engine."""

    MP4 = "mp4"
    WEBM = "webm"


class RenderQuality(str, Enum):
    """Quality tiers accepted by the rendering engine."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    MAX = "max"


class RenderConfig(BaseModel):
    """Configuration of one render request."""

    composition_id: str = Field(..., min_length=1, description="Composition to render")
    output_path: str = Field(..., min_length=1, description="Destination file path")
    format: OutputFormat = Field(default=OutputFormat.MP4, description="Output container format")
    quality: RenderQuality = Field(default=RenderQuality.HIGH, description="Quality tier")
    parallel: Optional[int] = Field(default=None, ge=1, description="Parallel render workers")
    props: Optional[dict[str, Any]] = Field(default=None, description="Composition input props")

    @field_validator("composition_id")
    @classmethod
    def validate_composition_id(cls, v: str) -> str:
        """Validate composition id."""
        if not v.strip():
            raise ValueError("composition_id cannot be empty")
        return v.strip()

    model_config = ConfigDict(frozen=True, extra="forbid")


@dataclass(frozen=True)
class RenderOutcome:
    """What the rendering engine reported for one render."""

    success: bool
    output_path: Optional[str] = None
    duration: float = 0
    file_size: int = 0
    error: Optional[str] = None


ENTRY_KEYS = (
    "id",
    "timestamp",
    "compositionId",
    "outputPath",
    "format",
    "quality",
    "fileSize",
    "duration",
    "renderTime",
    "success",
    "error",
    "props",
)


@dataclass(frozen=True)
class RenderMetadata:
    """One ledger entry.

    This is immutable - entries are only ever added or removed, never edited.
    ``error`` is only set for failed renders. Unknown JSON fields are kept in
    ``extra`` and written back unchanged.
    """

    id: str
    timestamp: str
    composition_id: str
    output_path: str
    format: str
    quality: str
    file_size: float = 0
    duration: float = 0
    render_time: float = 0
    success: bool = True
    error: Optional[str] = None
    props: Optional[dict[str, Any]] = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert entry to the ledger's JSON representation."""
        data = dict(self.extra)
        data.update(
            {
                "id": self.id,
                "timestamp": self.timestamp,
                "compositionId": self.composition_id,
                "outputPath": self.output_path,
                "format": self.format,
                "quality": self.quality,
                "fileSize": self.file_size,
                "duration": self.duration,
                "renderTime": self.render_time,
                "success": self.success,
            }
        )
        if self.error is not None:
            data["error"] = self.error
        if self.props is not None:
            data["props"] = self.props
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RenderMetadata":
        """Build an entry from its JSON representation.

        Raises:
            ValueError: If a required field is missing or has the wrong type
        """
        if not isinstance(data, dict):
            raise ValueError(f"Render entry must be an object, got {type(data).__name__}")

        try:
            success = data["success"]
            entry = cls(
                id=str(data["id"]),
                timestamp=str(data["timestamp"]),
                composition_id=str(data["compositionId"]),
                output_path=str(data["outputPath"]),
                format=str(data["format"]),
                quality=str(data["quality"]),
                file_size=_non_negative(data.get("fileSize", 0), "fileSize"),
                duration=_non_negative(data.get("duration", 0), "duration"),
                render_time=_non_negative(data.get("renderTime", 0), "renderTime"),
                success=success,
                error=data.get("error") if not success else None,
                props=data.get("props"),
                extra={key: value for key, value in data.items() if key not in ENTRY_KEYS},
            )
        except KeyError as e:
            raise ValueError(f"Render entry is missing field {e}") from e

        if not isinstance(success, bool):
            raise ValueError(f"Render entry field 'success' must be a boolean, got {success!r}")
        if entry.props is not None and not isinstance(entry.props, dict):
            raise ValueError("Render entry field 'props' must be an object")
        return entry


def _non_negative(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValueError(f"Render entry field '{name}' must be a number, got {value!r}")
    if value < 0:
        raise ValueError(f"Render entry field '{name}' must be >= 0, got {value!r}")
    return value


LEDGER_KEYS = ("projectName", "version", "created", "lastRender", "totalRenders", "renders")


@dataclass
class ProjectMetadata:
    """The render ledger of one output directory.

    ``renders`` is a fixed-capacity ring buffer ordered newest first: adding an
    entry to a full buffer evicts the oldest one. ``total_renders`` counts every
    render ever recorded and is never decremented by eviction or retention.
    """

    project_name: str
    version: str
    created: str
    last_render: str
    total_renders: int = 0
    renders: deque = field(default_factory=lambda: deque(maxlen=DEFAULT_MAX_HISTORY))
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def new(
        cls,
        project_name: str,
        max_history: int = DEFAULT_MAX_HISTORY,
        now: Optional[str] = None,
    ) -> "ProjectMetadata":
        """Create an empty ledger with zeroed counters."""
        timestamp = now or utc_now_iso()
        return cls(
            project_name=project_name,
            version=APP_VERSION,
            created=timestamp,
            last_render=timestamp,
            total_renders=0,
            renders=deque(maxlen=max_history),
        )

    @property
    def max_history(self) -> int:
        """Capacity of the render history."""
        return self.renders.maxlen

    def add_render(self, entry: RenderMetadata) -> None:
        """Record a new render as the newest entry."""
        self.renders.appendleft(entry)
        self.total_renders += 1
        self.last_render = entry.timestamp

    def replace_renders(self, entries: Iterable[RenderMetadata]) -> None:
        """Replace the retained history, keeping the newest ``max_history`` entries."""
        self.renders = _bounded(list(entries), self.max_history)

    def to_dict(self) -> dict[str, Any]:
        """Convert the ledger to its JSON document, preserving unknown fields."""
        data = dict(self.extra)
        data.update(
            {
                "projectName": self.project_name,
                "version": self.version,
                "created": self.created,
                "lastRender": self.last_render,
                "totalRenders": self.total_renders,
                "renders": [entry.to_dict() for entry in self.renders],
            }
        )
        return data

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], max_history: int = DEFAULT_MAX_HISTORY
    ) -> "ProjectMetadata":
        """Build a ledger from its JSON document.

        Raises:
            ValueError: If the document does not have the ledger shape
        """
        if not isinstance(data, dict):
            raise ValueError(f"Ledger must be a JSON object, got {type(data).__name__}")

        raw_renders = data.get("renders", [])
        if not isinstance(raw_renders, list):
            raise ValueError("Ledger field 'renders' must be a list")
        renders = [RenderMetadata.from_dict(item) for item in raw_renders]

        total_renders = data.get("totalRenders", len(renders))
        if isinstance(total_renders, bool) or not isinstance(total_renders, int):
            raise ValueError(f"Ledger field 'totalRenders' must be an integer, got {total_renders!r}")

        created = data.get("created") or utc_now_iso()
        ledger = cls(
            project_name=str(data.get("projectName", "")),
            version=str(data.get("version", APP_VERSION)),
            created=str(created),
            last_render=str(data.get("lastRender") or created),
            total_renders=max(total_renders, len(renders)),
            renders=_bounded(renders, max_history),
            extra={key: value for key, value in data.items() if key not in LEDGER_KEYS},
        )
        return ledger


def _bounded(entries: list[RenderMetadata], max_history: int) -> deque:
    # deque(iterable, maxlen) keeps the tail; the newest entries are at the head
    return deque(entries[:max_history], maxlen=max_history)
