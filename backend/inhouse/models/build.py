"""
Build queue MongoDB model
"""
from pydantic import BaseModel, Field
from typing import Any, Optional
from datetime import datetime
from enum import Enum

class WebhookOutcome(str, Enum):
    QUEUED = "queued"
    SKIPPED_NO_REF = "skipped_no_ref"  # ping or other non-push event
    SKIPPED_BRANCH = "skipped_branch"

class BuildJob(BaseModel):
    full_name: Optional[str] = Field(None, alias="fullName")  # e.g. "owner/repo"
    name: Optional[str] = None
    repo: Optional[str] = None  # clone url
    commit: Optional[str] = None  # head commit sha
    endpoint: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow, alias="createdAt")

    # Owned by the build worker
    build_at: Optional[datetime] = Field(None, alias="buildAt")
    nr_of_attempts: int = Field(0, alias="nrOfAttempts")
    is_successful: bool = Field(False, alias="isSuccessful")
    message: Optional[str] = None

    pusher: Optional[Any] = None

    class Config:
        populate_by_name = True

    def to_document(self) -> dict:
        """Record as stored in the build queue collection"""
        return self.model_dump(by_alias=True)
