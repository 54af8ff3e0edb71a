"""Per-check results and the aggregated run report."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, computed_field


class CheckKind(str, Enum):
    """What a check exercises on the device."""

    STATUS = "status"
    COMMAND = "command"


class CheckOutcome(str, Enum):
    """Outcome of a single check."""

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"
    NOT_RUN = "not_run"


class CheckResult(BaseModel):
    """Outcome of one status or command check."""

    model_config = {
        "frozen": True,
        "extra": "forbid",
        "use_enum_values": True
    }

    row: str = Field(description="Contract row name")
    kind: CheckKind
    outcome: CheckOutcome
    device_types: List[str] = Field(default_factory=list)
    device_id: Optional[str] = None
    device_type: Optional[str] = None
    endpoint: Optional[str] = None
    payload: Optional[str] = Field(default=None, description="Command payload for command checks")
    detail: Optional[str] = Field(default=None, description="Failure or skip reason")
    duration_ms: float = Field(default=0.0, ge=0.0)

    @property
    def label(self) -> str:
        return f"{self.row}: {self.kind}"

    @property
    def passed(self) -> bool:
        return self.outcome == CheckOutcome.PASSED.value

    @property
    def failed(self) -> bool:
        return self.outcome == CheckOutcome.FAILED.value


class RunReport(BaseModel):
    """Aggregated results of one contract run."""

    model_config = {
        "extra": "forbid"
    }

    base_url: str
    started_at: datetime = Field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None
    device_count: int = Field(default=0, ge=0)
    results: List[CheckResult] = Field(default_factory=list)
    setup_error: Optional[str] = Field(default=None, description="Fatal error that aborted the run")

    def _count(self, outcome: CheckOutcome) -> int:
        return sum(1 for r in self.results if r.outcome == outcome.value)

    @computed_field
    @property
    def passed(self) -> int:
        return self._count(CheckOutcome.PASSED)

    @computed_field
    @property
    def failed(self) -> int:
        return self._count(CheckOutcome.FAILED)

    @computed_field
    @property
    def skipped(self) -> int:
        return self._count(CheckOutcome.SKIPPED)

    @computed_field
    @property
    def not_run(self) -> int:
        return self._count(CheckOutcome.NOT_RUN)

    @computed_field
    @property
    def success(self) -> bool:
        """True when nothing failed, nothing was cut off and setup succeeded."""
        return self.setup_error is None and self.failed == 0 and self.not_run == 0

    @computed_field
    @property
    def duration_seconds(self) -> float:
        if self.finished_at is None:
            return 0.0
        return round((self.finished_at - self.started_at).total_seconds(), 3)

    def failures(self) -> List[CheckResult]:
        return [r for r in self.results if r.failed]

    def summary(self) -> Dict[str, Any]:
        return {
            "passed": self.passed,
            "failed": self.failed,
            "skipped": self.skipped,
            "not_run": self.not_run,
            "success": self.success
        }

    def export_dict(self) -> Dict[str, Any]:
        """Export report as dictionary for JSON serialization."""
        return self.model_dump(mode='json')
