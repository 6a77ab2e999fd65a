# services/reporting.py

"""
Read-side aggregation for dashboards and analytics.

Every function here is pure: callers pass rows that the authorization
layer already allowed them to see, and get counts back. Nothing is
cached between page loads.
"""

from collections import Counter
from typing import Dict, Iterable, List, Optional

from core.complaint_lifecycle import DONE_STATUSES, OPEN_STATUSES
from core.utils import parse_timestamp
from models.enums import ComplaintPriority, ComplaintStatus, FundEntryType, PaymentStatus


def count_by(rows: Iterable[dict], key: str, default: str = "Unknown") -> Dict[str, int]:
    counts = Counter((row.get(key) or default) for row in rows)
    return dict(counts)


def complaint_breakdowns(complaints: List[dict]) -> Dict[str, Dict[str, int]]:
    return {
        "by_category": count_by(complaints, "category"),
        "by_status": count_by(complaints, "status"),
        "by_wing": count_by(complaints, "wing"),
        "by_priority": count_by(complaints, "priority"),
    }


def average_resolution_days(complaints: List[dict]) -> Optional[float]:
    """Mean days from created_at to resolved_at over resolved complaints; None if none."""
    durations = []
    for c in complaints:
        resolved_at = parse_timestamp(c.get("resolved_at"))
        created_at = parse_timestamp(c.get("created_at"))
        if resolved_at and created_at:
            durations.append((resolved_at - created_at).total_seconds() / 86400)

    if not durations:
        return None
    return round(sum(durations) / len(durations), 1)


def _statuses(complaints: List[dict]) -> List[str]:
    return [c.get("status") for c in complaints]


# -----------------------------------------------------
# Per-role complaint stats
# -----------------------------------------------------
def resident_complaint_stats(complaints: List[dict]) -> Dict[str, int]:
    statuses = _statuses(complaints)
    urgent = {ComplaintPriority.high.value, ComplaintPriority.critical.value}
    return {
        "total": len(complaints),
        "pending": sum(1 for s in statuses if s in {x.value for x in OPEN_STATUSES}),
        "resolved": sum(1 for s in statuses if s in {x.value for x in DONE_STATUSES}),
        "high_or_critical": sum(1 for c in complaints if c.get("priority") in urgent),
    }


def admin_complaint_stats(complaints: List[dict]) -> Dict[str, int]:
    statuses = _statuses(complaints)
    working = {ComplaintStatus.assigned.value, ComplaintStatus.in_progress.value}
    return {
        "total": len(complaints),
        "unassigned": statuses.count(ComplaintStatus.submitted.value),
        "in_progress": sum(1 for s in statuses if s in working),
        "resolved": sum(1 for s in statuses if s in {x.value for x in DONE_STATUSES}),
    }


def staff_task_stats(tasks: List[dict]) -> Dict[str, int]:
    statuses = _statuses(tasks)
    return {
        "total": len(tasks),
        "assigned": statuses.count(ComplaintStatus.assigned.value),
        "in_progress": statuses.count(ComplaintStatus.in_progress.value),
        "completed": sum(1 for s in statuses if s in {x.value for x in DONE_STATUSES}),
    }


# -----------------------------------------------------
# Resident activity feed
# -----------------------------------------------------
def build_activity_feed(complaints: List[dict], payments: List[dict], limit: int) -> List[dict]:
    activities = []

    for c in complaints:
        activities.append({
            "id": c.get("id"),
            "type": "complaint",
            "title": f"Complaint raised: {c.get('title')}",
            "subtitle": f"#{c.get('complaint_number')} · {c.get('category')}",
            "time": c.get("created_at"),
        })

    for p in payments:
        if p.get("status") != PaymentStatus.paid.value:
            continue
        activities.append({
            "id": p.get("id"),
            "type": "payment",
            "title": "Maintenance payment done",
            "subtitle": f"{p.get('amount')} · {p.get('month')}",
            "time": p.get("paid_at"),
        })

    def sort_key(item):
        parsed = parse_timestamp(item["time"]) if item["time"] else None
        return parsed.timestamp() if parsed else 0.0

    activities.sort(key=sort_key, reverse=True)
    return activities[:limit]


# -----------------------------------------------------
# Payments + fund ledger
# -----------------------------------------------------
def payment_summary(payments: List[dict], month: str) -> Dict[str, float]:
    paid = [p for p in payments if p.get("status") == PaymentStatus.paid.value]
    this_month = [p for p in paid if p.get("month") == month]
    return {
        "month": month,
        "total_collected": sum(float(p.get("amount") or 0) for p in paid),
        "collected_this_month": sum(float(p.get("amount") or 0) for p in this_month),
        "paid_this_month": len(this_month),
        "pending_dues": sum(1 for p in payments if p.get("status") == PaymentStatus.pending.value),
    }


def fund_totals(entries: List[dict]) -> Dict[str, float]:
    income = sum(float(e.get("amount") or 0) for e in entries if e.get("type") == FundEntryType.income.value)
    expense = sum(float(e.get("amount") or 0) for e in entries if e.get("type") == FundEntryType.expense.value)
    return {
        "total_income": income,
        "total_expense": expense,
        "balance": income - expense,
    }
