from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ReportMetrics(_CamelModel):
    fcp: float = 0
    lcp: float = 0
    cls: float = 0
    speed_index: float = Field(default=0, alias="speedIndex")
    tti: float = 0
    tbt: float = 0


class IssueCounts(_CamelModel):
    critical: int = 0
    warning: int = 0
    passed: int = 0


class ReportData(_CamelModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="allow")

    url: str = "N/A"
    email: str = "N/A"
    overall_score: float = Field(default=0, alias="overallScore")
    mobile_score: float = Field(default=0, alias="mobileScore")
    desktop_score: float = Field(default=0, alias="desktopScore")
    seo_score: float = Field(default=0, alias="seoScore")
    accessibility_score: float = Field(default=0, alias="accessibilityScore")
    best_practices_score: float = Field(default=0, alias="bestPracticesScore")
    performance_score: float | None = Field(default=None, alias="performanceScore")
    metrics: ReportMetrics = Field(default_factory=ReportMetrics)
    issues: IssueCounts = Field(default_factory=IssueCounts)
    recommendations: list[str] = Field(default_factory=list)
    timestamp: str | None = None

    @property
    def effective_performance_score(self) -> float:
        if self.performance_score is None:
            return self.overall_score
        return self.performance_score


class ReportDispatchRequest(_CamelModel):
    phone_numbers: list[str | int] | None = Field(default=None, alias="phoneNumbers")
    phone_number: str | int | None = Field(default=None, alias="phoneNumber")
    report_data: dict[str, Any] | None = Field(default=None, alias="reportData")

    def recipients(self) -> list[str | int]:
        if self.phone_numbers is None and self.phone_number not in (None, ""):
            return [self.phone_number]
        return list(self.phone_numbers or [])


class RecipientResult(_CamelModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    phone_number: str = Field(alias="phoneNumber")
    success: bool
    message_id: str | None = Field(default=None, alias="messageId")
    error: str | None = None

    @classmethod
    def delivered(cls, phone_number: str, message_id: str | None) -> "RecipientResult":
        return cls(phone_number=phone_number, success=True, message_id=message_id)

    @classmethod
    def failed(cls, phone_number: str, error: str) -> "RecipientResult":
        return cls(phone_number=phone_number, success=False, error=error)


class ReportDispatchResponse(_CamelModel):
    success: bool
    message: str
    results: list[RecipientResult]
    limit: int
    audits_remaining: int = Field(alias="auditsRemaining")


class AuditLimits(_CamelModel):
    max_audits_per_day: int = Field(alias="maxAuditsPerDay")
    max_phone_numbers_per_request: int = Field(alias="maxPhoneNumbersPerRequest")


class AuditStatusResponse(_CamelModel):
    success: bool
    message: str
    limits: AuditLimits
