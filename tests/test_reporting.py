# tests/test_reporting.py

"""
Pure aggregation helpers behind the dashboards.
"""

from services import reporting


COMPLAINTS = [
    {"id": "1", "status": "submitted", "category": "plumbing", "wing": "A", "priority": "high",
     "created_at": "2025-06-01T10:00:00+00:00"},
    {"id": "2", "status": "in_progress", "category": "plumbing", "wing": None, "priority": "low",
     "created_at": "2025-06-02T10:00:00+00:00"},
    {"id": "3", "status": "resolved", "category": "electricity", "wing": "B", "priority": "critical",
     "created_at": "2025-06-01T00:00:00Z", "resolved_at": "2025-06-03T00:00:00Z"},
    {"id": "4", "status": "closed", "category": "security", "wing": "A", "priority": "medium",
     "created_at": "2025-06-01T00:00:00+00:00", "resolved_at": "2025-06-02T00:00:00+00:00"},
]


def test_breakdowns_bucket_missing_values_as_unknown():
    breakdowns = reporting.complaint_breakdowns(COMPLAINTS)
    assert breakdowns["by_category"] == {"plumbing": 2, "electricity": 1, "security": 1}
    assert breakdowns["by_wing"] == {"A": 2, "Unknown": 1, "B": 1}
    assert breakdowns["by_status"]["resolved"] == 1


def test_average_resolution_days():
    assert reporting.average_resolution_days(COMPLAINTS) == 1.5
    assert reporting.average_resolution_days(COMPLAINTS[:2]) is None


def test_role_stats():
    assert reporting.resident_complaint_stats(COMPLAINTS) == {
        "total": 4, "pending": 2, "resolved": 2, "high_or_critical": 2,
    }
    assert reporting.admin_complaint_stats(COMPLAINTS) == {
        "total": 4, "unassigned": 1, "in_progress": 1, "resolved": 2,
    }
    assert reporting.staff_task_stats(COMPLAINTS[1:]) == {
        "total": 3, "assigned": 0, "in_progress": 1, "completed": 2,
    }


def test_activity_feed_merges_and_caps():
    payments = [
        {"id": "p1", "status": "paid", "amount": 2000, "month": "2025-05", "paid_at": "2025-06-01T12:00:00+00:00"},
        {"id": "p2", "status": "pending", "amount": 2000, "month": "2025-06", "paid_at": None},
    ]

    feed = reporting.build_activity_feed(COMPLAINTS, payments, limit=3)

    assert len(feed) == 3
    assert feed[0]["id"] == "2"
    assert "p2" not in [item["id"] for item in feed]
    assert [item["type"] for item in feed] == ["complaint", "payment", "complaint"]


def test_payment_summary_and_fund_totals():
    payments = [
        {"status": "paid", "amount": 2000, "month": "2025-06"},
        {"status": "paid", "amount": 1500, "month": "2025-05"},
        {"status": "pending", "amount": 2000, "month": "2025-06"},
    ]
    assert reporting.payment_summary(payments, "2025-06") == {
        "month": "2025-06",
        "total_collected": 3500.0,
        "collected_this_month": 2000.0,
        "paid_this_month": 1,
        "pending_dues": 1,
    }

    entries = [{"type": "income", "amount": 100}, {"type": "expense", "amount": 40}]
    assert reporting.fund_totals(entries) == {"total_income": 100.0, "total_expense": 40.0, "balance": 60.0}
