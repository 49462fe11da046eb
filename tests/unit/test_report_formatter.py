"""Unit tests for the WhatsApp audit report text."""

from datetime import datetime, timezone

import pytest

from audit_relay.schemas.dispatch import IssueCounts, ReportData
from audit_relay.services.report_formatter import (
    evaluate_metric,
    format_report_message,
    format_timestamp,
    health_status,
    pass_rate,
    score_rating,
)

NOW = datetime(2026, 10, 18, 18, 27, tzinfo=timezone.utc)


class TestRatings:
    @pytest.mark.parametrize(
        "score, label",
        [(100, "Excellent"), (90, "Excellent"), (89, "Good"), (75, "Good"), (50, "Average"), (1, "Poor"), (0, "N/A")],
    )
    def test_score_rating(self, score, label):
        assert score_rating(score).label == label

    @pytest.mark.parametrize(
        "metric, value, label",
        [
            ("lcp", 2.5, "Excellent"),
            ("lcp", 3.9, "Good"),
            ("fcp", 5.0, "Needs Improvement"),
            ("tti", 7.2, "Poor"),
            ("cls", 0.05, "Excellent"),
            ("cls", 0.3, "Needs Improvement"),
            ("cls", 0.8, "Poor"),
            ("tbt", 150, "Excellent"),
            ("tbt", 450, "Needs Improvement"),
            ("tbt", 900, "Poor"),
            ("inp", 10, "N/A"),
        ],
    )
    def test_evaluate_metric(self, metric, value, label):
        assert evaluate_metric(metric, value).label == label


class TestIssueSummaries:
    def test_pass_rate_rounds(self):
        assert pass_rate(IssueCounts(critical=1, warning=1, passed=1)) == 33
        assert pass_rate(IssueCounts(critical=0, warning=1, passed=1)) == 50
        assert pass_rate(IssueCounts(critical=1, warning=0, passed=2)) == 67

    def test_pass_rate_without_checks(self):
        assert pass_rate(IssueCounts()) == 100

    @pytest.mark.parametrize(
        "issues, status",
        [
            (IssueCounts(critical=6), "🚨 High Risk"),
            (IssueCounts(critical=1), "⚠️ Moderate Risk"),
            (IssueCounts(passed=10), "✅ Excellent Health"),
            (IssueCounts(warning=3), "🟡 Needs Improvement"),
        ],
    )
    def test_health_status(self, issues, status):
        assert health_status(issues) == status


class TestFormatReportMessage:
    def test_timestamp_in_report_timezone(self):
        assert format_timestamp(NOW, "Asia/Kolkata") == "Oct 18, 2026, 11:57 PM"
        assert format_timestamp(NOW, "UTC") == "Oct 18, 2026, 6:27 PM"

    def test_full_report(self):
        report = {
            "url": "https://example.com",
            "email": "owner@example.com",
            "overallScore": 92,
            "mobileScore": 71,
            "desktopScore": 95,
            "seoScore": 88,
            "accessibilityScore": 100,
            "bestPracticesScore": 45,
            "metrics": {"fcp": 1.234, "lcp": 2.9, "cls": 0.12, "speedIndex": 3.1, "tti": 4.5, "tbt": 310.4},
            "issues": {"critical": 2, "warning": 3, "passed": 15},
            "recommendations": [f"Fix item {n}" for n in range(1, 8)],
        }

        message = format_report_message(report, now=NOW)

        assert message.startswith("🚀 *COMPREHENSIVE SEO AUDIT REPORT*")
        assert "🌐 *Website:* https://example.com" in message
        assert "📧 *Contact:* owner@example.com" in message
        assert "📊 *Status:* ⚠️ Moderate Risk" in message
        assert "📅 *Generated:* Oct 18, 2026, 11:57 PM" in message
        assert "🧩 *Overall:* 92/100 _(Excellent)_" in message
        assert "⚡ *Performance:* 92/100 _(Excellent)_" in message
        assert "📱 *Mobile:* 71/100 _(Average)_" in message
        assert "🧠 *Best Practices:* 45/100 _(Poor)_" in message
        assert "⏱️ *FCP:* 1.23s _(Excellent)_" in message
        assert "🌀 *CLS:* 0.120 _(Good)_" in message
        assert "🚧 *TBT:* 310ms _(Good)_" in message
        assert "📈 *Pass Rate:* 75%" in message
        assert "📊 *Total:* 5" in message
        assert "5. Fix item 5" in message
        assert "6. Fix item 6" not in message
        assert "Professional SEO Audit by Marketiq Junction" in message

    def test_defaults_for_empty_fields(self):
        message = format_report_message({"url": "https://example.com"}, now=NOW)

        assert "📧 *Contact:* N/A" in message
        assert "🧩 *Overall:* 0/100 _(N/A)_" in message
        assert "✅ *Critical:* 0" in message
        assert "TOP RECOMMENDATIONS" not in message

    def test_explicit_performance_and_timestamp(self):
        report = ReportData(overall_score=60, performance_score=99, timestamp="yesterday")

        message = format_report_message(report, brand="Acme SEO")

        assert "⚡ *Performance:* 99/100 _(Excellent)_" in message
        assert "📅 *Generated:* yesterday" in message
        assert "Professional SEO Audit by Acme SEO" in message

    def test_report_is_not_mutated(self):
        report = {"url": "https://example.com", "recommendations": ["a"]}

        format_report_message(report, now=NOW)

        assert report == {"url": "https://example.com", "recommendations": ["a"]}
