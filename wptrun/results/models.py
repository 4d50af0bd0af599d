"""
Data models for test results.

Defines the two status vocabularies reported by testharness.js, the raw
payload a page sends back to the runner, and the immutable Result built
from it.
"""

import hashlib
from enum import IntEnum
from typing import Dict, Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class HarnessStatus(IntEnum):
    """Status of a whole test file. Must match testharness.js TestsStatus."""

    OK = 0
    ERROR = 1
    TIMEOUT = 2
    CRASH = -1


class SubtestStatus(IntEnum):
    """Status of a single subtest or reftest verdict. Must match testharness.js Test."""

    PASS = 0
    FAIL = 1
    TIMEOUT = 2
    NOTRUN = 3


Status = Union[HarnessStatus, SubtestStatus]


class RawSubtestResult(BaseModel):
    """One subtest entry as sent by testharnessreport.js."""

    model_config = ConfigDict(extra="ignore")

    name: str
    status: SubtestStatus
    message: Optional[str] = None
    stack: Optional[str] = None


class RawResult(BaseModel):
    """Completion payload as sent by testharnessreport.js."""

    model_config = ConfigDict(extra="ignore")

    status: HarnessStatus
    message: Optional[str] = None
    stack: Optional[str] = None
    subtests: Optional[List[RawSubtestResult]] = None


class SubtestResult(BaseModel):
    """Outcome of one subtest."""

    model_config = ConfigDict(frozen=True)

    name: str
    status: SubtestStatus
    message: Optional[str] = None
    stack: Optional[str] = Field(None, repr=False)

    def to_report(self) -> Dict[str, Any]:
        # Do not include stack in the report.
        return {
            "name": self.name,
            "status": self.status.name,
            "message": self.message,
        }

    def __str__(self) -> str:
        message = f"{self.status.name} {self.name}"
        if self.message:
            message += f": {self.message}"
        return message


class Result(BaseModel):
    """
    Finalized outcome of one test.

    The status is either a HarnessStatus (testharness tests and raw reftest
    renders) or a SubtestStatus (reftest verdicts); the enum class itself
    tells which vocabulary applies.
    """

    model_config = ConfigDict(frozen=True)

    test: str
    status: Status
    message: Optional[str] = None
    stack: Optional[str] = Field(None, repr=False)
    duration: Optional[int] = Field(None, ge=0, description="Wall-clock milliseconds")
    subtests: List[SubtestResult] = Field(default_factory=list)
    screenshot: Optional[bytes] = Field(None, repr=False)

    @field_validator("status", mode="before")
    @classmethod
    def validate_status_is_tagged(cls, v):
        """Require an enum member so the vocabulary is never guessed from an int."""
        if not isinstance(v, (HarnessStatus, SubtestStatus)):
            raise ValueError(
                f"status must be a HarnessStatus or SubtestStatus, got {v!r}"
            )
        return v

    @classmethod
    def from_raw(
        cls,
        test: str,
        raw: Union[RawResult, Dict[str, Any]],
        duration: Optional[int] = None,
        screenshot: Optional[bytes] = None,
    ) -> "Result":
        """
        Wrap a page payload into a Result.

        Args:
            test: Test identifier, typically the URL path
            raw: RawResult or the dict a page handed to the finish binding
            duration: Milliseconds from start to finalization, if known
            screenshot: Rendered image for reftests

        Returns:
            Finalized Result
        """
        if not isinstance(raw, RawResult):
            raw = RawResult.model_validate(raw)

        return cls(
            test=test,
            status=raw.status,
            message=raw.message or None,
            stack=raw.stack or None,
            duration=duration,
            subtests=[
                SubtestResult(
                    name=s.name,
                    status=s.status,
                    message=s.message or None,
                    stack=s.stack or None,
                )
                for s in raw.subtests or []
            ],
            screenshot=screenshot,
        )

    @property
    def is_harness_status(self) -> bool:
        return isinstance(self.status, HarnessStatus)

    @property
    def has_screenshot(self) -> bool:
        return self.screenshot is not None

    def screenshot_hash(self) -> str:
        """
        Content hash of the screenshot.

        A result without a screenshot hashes to the empty string, which never
        equals the digest of real image bytes.
        """
        if self.screenshot is None:
            return ""
        return hashlib.sha256(self.screenshot).hexdigest()

    def with_verdict(self, status: Status, message: Optional[str] = None) -> "Result":
        """Return a copy carrying a reftest verdict instead of the render status."""
        return self.model_copy(update={"status": status, "message": message})

    def to_report(self) -> Dict[str, Any]:
        """Serialize for the report. Never includes stack or screenshot."""
        return {
            "test": self.test,
            "status": self.status.name,
            "message": self.message,
            "duration": self.duration,
            "subtests": [s.to_report() for s in self.subtests],
        }

    def __str__(self) -> str:
        message = f"{self.status.name} {self.test}"
        if self.message:
            message += f": {self.message}"
        return message
