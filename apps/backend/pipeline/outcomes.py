"""
Enrichment data model and per-job outcome variants.

JobRecord mirrors the stored job row this pipeline reads and writes back.
ExtractionResult is the ephemeral per-job extraction. Each job ends in exactly
one outcome variant, which the orchestrator hands to a single write-back step.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel


AUTH_REQUIRED_MESSAGE = "LinkedIn authentication required. Log in to LinkedIn again and retry."
NO_DESCRIPTION_MESSAGE = (
    'Could not find job description on page. The "About the job" section may not have loaded.'
)
NO_URL_MESSAGE = "No URL"
CANCELLED_MESSAGE = "Cancelled"


class JobStatus(str, Enum):
    NEEDS_ENRICHMENT = "needs_enrichment"
    NO_RESPONSE = "no_response"
    ENRICHMENT_FAILED = "enrichment_failed"


class SourceStrategy(str, Enum):
    """Which extraction strategy produced the description."""
    JSON_LD = "json-ld"
    SSR_SELECTOR = "ssr-selector"
    DOM_HEADING = "dom-heading"
    DOM_SELECTOR = "dom-selector"

    @property
    def is_fast_path(self) -> bool:
        return self in (SourceStrategy.JSON_LD, SourceStrategy.SSR_SELECTOR)


class JobRecord(BaseModel):
    """Stored job row, restricted to the columns the pipeline touches."""
    id: Union[int, str]
    url: Optional[str] = None
    status: str = JobStatus.NEEDS_ENRICHMENT.value
    title: Optional[str] = None
    company: Optional[str] = None
    description: Optional[str] = None
    salary: Optional[str] = None
    job_type: Optional[str] = None
    seniority_level: Optional[str] = None
    num_applicants: Optional[int] = None
    easy_apply: Optional[bool] = None
    updated_at: Optional[datetime] = None


class ExtractionResult(BaseModel):
    """Fields extracted for one job. Never persisted as-is."""
    description: Optional[str] = None
    salary: Optional[str] = None
    job_type: Optional[str] = None
    seniority_level: Optional[str] = None
    num_applicants: Optional[int] = None
    easy_apply: Optional[bool] = None
    source_strategy: Optional[SourceStrategy] = None
    auth_required: bool = False

    def has_description(self, min_length: int = 1) -> bool:
        return bool(self.description and len(self.description.strip()) >= min_length)

    def header_fields(self) -> Dict[str, Any]:
        """Non-description extracted fields that carry a value."""
        fields = {
            'salary': self.salary,
            'job_type': self.job_type,
            'seniority_level': self.seniority_level,
            'num_applicants': self.num_applicants,
            'easy_apply': self.easy_apply,
        }
        return {k: v for k, v in fields.items() if v is not None}

    def merge_missing(self, other: "ExtractionResult") -> "ExtractionResult":
        """Fill header fields that are still null from another result."""
        updates = {k: v for k, v in other.header_fields().items() if getattr(self, k) is None}
        return self.model_copy(update=updates)


# ----------------------------
# Outcome variants
# ----------------------------

@dataclass(frozen=True)
class Success:
    result: ExtractionResult
    strategy: SourceStrategy

    def to_entry(self) -> Dict[str, Any]:
        return {"success": True}


@dataclass(frozen=True)
class AuthRequired:
    reason: str

    def to_entry(self) -> Dict[str, Any]:
        return {"success": False, "error": AUTH_REQUIRED_MESSAGE}


@dataclass(frozen=True)
class NoUrl:

    def to_entry(self) -> Dict[str, Any]:
        return {"success": False, "error": NO_URL_MESSAGE}


@dataclass(frozen=True)
class NoDescription:
    detail: str = ""

    def to_entry(self) -> Dict[str, Any]:
        return {"success": False, "error": NO_DESCRIPTION_MESSAGE}


@dataclass(frozen=True)
class FetchFailed:
    reason: str

    def to_entry(self) -> Dict[str, Any]:
        return {"success": False, "error": self.reason}


JobOutcome = Union[Success, AuthRequired, NoUrl, NoDescription, FetchFailed]


def is_fast_path_success(outcome: Optional[JobOutcome]) -> bool:
    return isinstance(outcome, Success) and outcome.strategy.is_fast_path
