from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


# -----------------------------------------------------
# ROLE (exactly one per principal, fixed at signup)
# -----------------------------------------------------
class Role(BaseStrEnum):
    resident = "resident"
    admin = "admin"
    maintenance_staff = "maintenance_staff"


# -----------------------------------------------------
# COMPLAINTS
# -----------------------------------------------------
class ComplaintCategory(BaseStrEnum):
    water = "water"
    electricity = "electricity"
    security = "security"
    cleanliness = "cleanliness"
    plumbing = "plumbing"
    elevator = "elevator"
    parking = "parking"
    noise = "noise"
    other = "other"


class ComplaintPriority(BaseStrEnum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


class ComplaintStatus(BaseStrEnum):
    """Workflow state: submitted → assigned → in_progress → resolved → closed."""

    submitted = "submitted"
    assigned = "assigned"
    in_progress = "in_progress"
    resolved = "resolved"
    closed = "closed"


# -----------------------------------------------------
# NOTIFICATIONS
# -----------------------------------------------------
class NotificationType(BaseStrEnum):
    info = "info"
    warning = "warning"
    success = "success"
    complaint = "complaint"
    payment = "payment"
    announcement = "announcement"


# -----------------------------------------------------
# MEETINGS
# -----------------------------------------------------
class RsvpStatus(BaseStrEnum):
    attending = "attending"
    not_attending = "not_attending"


# -----------------------------------------------------
# PAYMENTS
# -----------------------------------------------------
class PaymentStatus(BaseStrEnum):
    pending = "pending"
    paid = "paid"


class PaymentMethod(BaseStrEnum):
    online = "online"
    upi = "upi"
    cash = "cash"
    cheque = "cheque"
    bank_transfer = "bank_transfer"


# -----------------------------------------------------
# STAFF ASSIGNMENTS (work orders)
# -----------------------------------------------------
class AssignmentSchedule(BaseStrEnum):
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"
    on_demand = "on_demand"


class AssignmentStatus(BaseStrEnum):
    active = "active"
    completed = "completed"
    cancelled = "cancelled"


# -----------------------------------------------------
# SOCIETY FUND LEDGER
# -----------------------------------------------------
class FundEntryType(BaseStrEnum):
    income = "income"
    expense = "expense"
