"""Deployment data models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from bgdeploy.core.exceptions import ValidationError

VENERABLE_SUFFIX = "-venerable"


@dataclass(frozen=True)
class DeploymentInfo:
    """Target application and credentials for one deployment attempt."""

    app_name: str
    instances: int = 1
    username: str = ""
    password: str = field(default="", repr=False)
    org: str = ""
    space: str = ""
    skip_ssl: bool = False
    domain: str = ""

    def __post_init__(self) -> None:
        if not self.app_name:
            raise ValidationError("app name must not be empty")
        if self.instances < 0:
            raise ValidationError(
                f"instances must be non-negative, got {self.instances}",
            )

    @property
    def venerable_name(self) -> str:
        """Name the previous live version is kept under during a deploy."""
        return self.app_name + VENERABLE_SUFFIX


class DeploymentStatus(str, Enum):
    """Deployment status."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    ROLLED_BACK = "rolled_back"


@dataclass
class DeploymentEvent:
    """Deployment event for the run summary."""

    timestamp: datetime
    event_type: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type,
            "message": self.message,
        }


@dataclass
class DeploymentResult:
    """Outcome of one blue-green deployment against a single foundation."""

    app_name: str
    foundation_url: str
    status: DeploymentStatus = DeploymentStatus.PENDING
    first_deploy: bool = False
    logs: bytes | None = None
    message: str = ""
    events: list[DeploymentEvent] = field(default_factory=list)
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == DeploymentStatus.SUCCEEDED

    @property
    def duration_seconds(self) -> float | None:
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def add_event(self, event_type: str, message: str) -> None:
        """Add an event to the run summary."""
        self.events.append(
            DeploymentEvent(
                timestamp=datetime.now(timezone.utc),
                event_type=event_type,
                message=message,
            )
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "app_name": self.app_name,
            "foundation_url": self.foundation_url,
            "status": self.status.value,
            "first_deploy": self.first_deploy,
            "message": self.message,
            "has_logs": self.logs is not None,
            "events": [e.to_dict() for e in self.events],
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }
