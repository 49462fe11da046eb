from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping
from zoneinfo import ZoneInfo

from audit_relay.schemas.dispatch import IssueCounts, ReportData

DIVIDER = "━" * 26
MAX_RECOMMENDATIONS = 5
DEFAULT_BRAND = "Marketiq Junction"
DEFAULT_TIMEZONE = "Asia/Kolkata"

# (upper bound, label, emoji); value <= bound wins
TIMING_THRESHOLDS = ((2.5, "Excellent", "🟢"), (4, "Good", "🟡"), (6, "Needs Improvement", "🟠"))
METRIC_THRESHOLDS = {
    "fcp": TIMING_THRESHOLDS,
    "lcp": TIMING_THRESHOLDS,
    "speedIndex": TIMING_THRESHOLDS,
    "tti": TIMING_THRESHOLDS,
    "cls": ((0.1, "Excellent", "🟢"), (0.25, "Good", "🟡"), (0.5, "Needs Improvement", "🟠")),
    "tbt": ((200, "Excellent", "🟢"), (400, "Good", "🟡"), (600, "Needs Improvement", "🟠")),
}


@dataclass(frozen=True)
class Rating:
    label: str
    emoji: str


NOT_AVAILABLE = Rating("N/A", "⚪")


def score_rating(score: float) -> Rating:
    if score >= 90:
        return Rating("Excellent", "🟢")
    if score >= 75:
        return Rating("Good", "🟡")
    if score >= 50:
        return Rating("Average", "🟠")
    if score > 0:
        return Rating("Poor", "🔴")
    return NOT_AVAILABLE


def evaluate_metric(metric: str, value: float) -> Rating:
    thresholds = METRIC_THRESHOLDS.get(metric)
    if thresholds is None:
        return NOT_AVAILABLE
    for bound, label, emoji in thresholds:
        if value <= bound:
            return Rating(label, emoji)
    return Rating("Poor", "🔴")


def pass_rate(issues: IssueCounts) -> int:
    total = issues.critical + issues.warning + issues.passed
    if total <= 0:
        return 100
    return int(issues.passed / total * 100 + 0.5)


def health_status(issues: IssueCounts) -> str:
    total_issues = issues.critical + issues.warning
    if issues.critical > 5:
        return "🚨 High Risk"
    if issues.critical > 0:
        return "⚠️ Moderate Risk"
    if total_issues == 0:
        return "✅ Excellent Health"
    return "🟡 Needs Improvement"


def format_timestamp(now: datetime | None = None, tz_name: str = DEFAULT_TIMEZONE) -> str:
    """Render like ``Oct 18, 2026, 11:57 PM`` in the report's timezone."""
    moment = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    local = moment.astimezone(ZoneInfo(tz_name))
    hour = local.hour % 12 or 12
    return f"{local:%b} {local.day}, {local.year}, {hour}:{local:%M} {local:%p}"


def format_report_message(
    report: ReportData | Mapping[str, Any],
    *,
    now: datetime | None = None,
    brand: str = DEFAULT_BRAND,
    tz_name: str = DEFAULT_TIMEZONE,
) -> str:
    """Build the WhatsApp text for an audit report.

    The result only depends on ``report`` and the moment used for the
    "Generated" line (``report.timestamp`` when given, else ``now``).
    """
    if not isinstance(report, ReportData):
        report = ReportData.model_validate(report)

    issues = report.issues
    metrics = report.metrics
    timestamp = report.timestamp or format_timestamp(now, tz_name)
    performance = report.effective_performance_score

    sections = [
        "\n".join(
            [
                "🚀 *COMPREHENSIVE SEO AUDIT REPORT*",
                "",
                DIVIDER,
                "",
                f"🌐 *Website:* {report.url}",
                f"📧 *Contact:* {report.email}",
                f"📊 *Status:* {health_status(issues)}",
                f"📅 *Generated:* {timestamp}",
            ]
        ),
        _section(
            "📊 PERFORMANCE OVERVIEW",
            [
                _score_line("🧩", "Overall", report.overall_score),
                _score_line("⚡", "Performance", performance),
                _score_line("📱", "Mobile", report.mobile_score),
                _score_line("💻", "Desktop", report.desktop_score),
            ],
        ),
        _section(
            "🎯 CORE METRICS",
            [
                _score_line("🔍", "SEO", report.seo_score),
                _score_line("♿", "Accessibility", report.accessibility_score),
                _score_line("🧠", "Best Practices", report.best_practices_score),
            ],
        ),
        _section(
            "⚡ CORE WEB VITALS",
            [
                _metric_line("⏱️", "FCP", "fcp", metrics.fcp, f"{metrics.fcp:.2f}s"),
                _metric_line("📍", "LCP", "lcp", metrics.lcp, f"{metrics.lcp:.2f}s"),
                _metric_line("🌀", "CLS", "cls", metrics.cls, f"{metrics.cls:.3f}"),
                _metric_line(
                    "🏎️", "Speed Index", "speedIndex", metrics.speed_index, f"{metrics.speed_index:.2f}s"
                ),
                _metric_line("🕐", "TTI", "tti", metrics.tti, f"{metrics.tti:.2f}s"),
                _metric_line("🚧", "TBT", "tbt", metrics.tbt, f"{metrics.tbt:.0f}ms"),
            ],
        ),
        _section(
            "🔍 ISSUES SUMMARY",
            [
                f"{'🔴' if issues.critical else '✅'} *Critical:* {issues.critical}",
                f"{'🟡' if issues.warning else '✅'} *Warnings:* {issues.warning}",
                f"🟢 *Passed:* {issues.passed}",
                f"📈 *Pass Rate:* {pass_rate(issues)}%",
                f"📊 *Total:* {issues.critical + issues.warning}",
            ],
        ),
    ]

    if report.recommendations:
        top = [
            f"{index}. {item}"
            for index, item in enumerate(report.recommendations[:MAX_RECOMMENDATIONS], start=1)
        ]
        sections.append(_section("💡 TOP RECOMMENDATIONS", top))

    sections.append(
        "\n".join(
            [
                DIVIDER,
                "",
                f"✨ _Professional SEO Audit by {brand}_",
                "📞 *Need help?* Reply to discuss optimization strategies!",
                "🌐 Let's elevate your digital presence together.",
            ]
        )
    )
    return "\n\n".join(sections)


def _section(title: str, lines: list[str]) -> str:
    return "\n".join([DIVIDER, f"*{title}*", DIVIDER, "", *lines])


def _score_line(emoji: str, label: str, score: float) -> str:
    return f"{emoji} *{label}:* {score:g}/100 _({score_rating(score).label})_"


def _metric_line(emoji: str, label: str, metric: str, value: float, shown: str) -> str:
    return f"{emoji} *{label}:* {shown} _({evaluate_metric(metric, value).label})_"
