# -------------------------
# Enums
# -------------------------
from .enums import (
    Role,
    ComplaintCategory,
    ComplaintPriority,
    ComplaintStatus,
    NotificationType,
    RsvpStatus,
    PaymentStatus,
    PaymentMethod,
    AssignmentSchedule,
    AssignmentStatus,
    FundEntryType,
)

# -------------------------
# Auth + Profiles
# -------------------------
from .auth import LoginRequest, TokenResponse, SignupRequest, SignupResponse
from .profile import ProfileRead, ProfileUpdate, DirectoryResponse

# -------------------------
# Complaints
# -------------------------
from .complaint import (
    ComplaintCreate,
    ComplaintRead,
    ComplaintAssign,
    ComplaintStatusUpdate,
    ComplaintClose,
)

# -------------------------
# Announcements / Meetings / Notifications
# -------------------------
from .announcement import AnnouncementCreate, AnnouncementUpdate, AnnouncementRead, AnnouncementPosted
from .meeting import MeetingCreate, MeetingUpdate, MeetingRead, RsvpRequest, RsvpRead
from .notification import NotificationRead, BroadcastRequest, FanoutResult, UnreadCount

# -------------------------
# Payments / Staff / Funds
# -------------------------
from .payment import PaymentCreate, DueCreate, PaymentRead, PaymentSummary
from .staff_assignment import StaffAssignmentCreate, StaffAssignmentStatusUpdate, StaffAssignmentRead
from .fund import FundEntryCreate, FundEntryRead, FundLedger

__all__ = [
    # enums
    "Role",
    "ComplaintCategory",
    "ComplaintPriority",
    "ComplaintStatus",
    "NotificationType",
    "RsvpStatus",
    "PaymentStatus",
    "PaymentMethod",
    "AssignmentSchedule",
    "AssignmentStatus",
    "FundEntryType",

    # auth + profiles
    "LoginRequest",
    "TokenResponse",
    "SignupRequest",
    "SignupResponse",
    "ProfileRead",
    "ProfileUpdate",
    "DirectoryResponse",

    # complaints
    "ComplaintCreate",
    "ComplaintRead",
    "ComplaintAssign",
    "ComplaintStatusUpdate",
    "ComplaintClose",

    # announcements / meetings / notifications
    "AnnouncementCreate",
    "AnnouncementUpdate",
    "AnnouncementRead",
    "AnnouncementPosted",
    "MeetingCreate",
    "MeetingUpdate",
    "MeetingRead",
    "RsvpRequest",
    "RsvpRead",
    "NotificationRead",
    "BroadcastRequest",
    "FanoutResult",
    "UnreadCount",

    # payments / staff / funds
    "PaymentCreate",
    "DueCreate",
    "PaymentRead",
    "PaymentSummary",
    "StaffAssignmentCreate",
    "StaffAssignmentStatusUpdate",
    "StaffAssignmentRead",
    "FundEntryCreate",
    "FundEntryRead",
    "FundLedger",
]
