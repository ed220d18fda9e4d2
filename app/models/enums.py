from enum import Enum


class LeaveType(str, Enum):
    annual = "annual"
    casual = "casual"
    sick = "sick"
    maternity = "maternity"


class LeaveStatus(str, Enum):
    pending = "pending"
    recommended = "recommended"
    approved = "approved"
    rejected = "rejected"


class RecommendationDecision(str, Enum):
    recommended = "recommended"
    not_recommended = "not_recommended"


class ApprovalDecision(str, Enum):
    approved = "approved"
    not_approved = "not_approved"


class ProgramStatus(str, Enum):
    draft = "draft"
    submitted = "submitted"
    approved = "approved"
    rejected = "rejected"


class ProgramDecision(str, Enum):
    approved = "approved"
    rejected = "rejected"


class NotificationKind(str, Enum):
    leave_submitted = "leave-submitted"
    leave_recommended = "leave-recommended"
    leave_decided = "leave-decided"
    program_decided = "program-decided"
