# app/core/constants.py

from app.models.user import UserRole

# ==========================================================
# ROLE SCOPE
# ==========================================================
# "ALL"      -> system-wide super-role
# "DIVISION" -> limited to the user's own division
# "SELF"     -> no cross-user visibility
ROLE_SCOPE = {
    UserRole.Admin: "ALL",
    UserRole.HOD: "ALL",
    UserRole.DivisionalHead: "DIVISION",
    UserRole.DivisionCC: "DIVISION",
    UserRole.Staff: "SELF",
}

# ==========================================================
# WORKFLOW CAPABILITIES
# ==========================================================
# Roles that may act on a leave at the recommendation stage without being
# the named recommender (scope still applies).
RECOMMEND_ROLES = {UserRole.Admin, UserRole.HOD, UserRole.DivisionalHead, UserRole.DivisionCC}

# Roles that may act at the approval stage without being the named approver.
APPROVE_ROLES = {UserRole.Admin, UserRole.HOD, UserRole.DivisionalHead}

# Roles that can be picked on the application form.
ELIGIBLE_RECOMMENDER_ROLES = {UserRole.DivisionCC, UserRole.DivisionalHead}
ELIGIBLE_APPROVER_DIVISION_ROLES = {UserRole.DivisionalHead}
ELIGIBLE_APPROVER_GLOBAL_ROLES = {UserRole.HOD, UserRole.Admin}
ACTING_OFFICER_ROLES = {UserRole.Staff}

# Advanced program entries have a single approval step.
PROGRAM_DECISION_ROLES = {UserRole.Admin, UserRole.HOD, UserRole.DivisionalHead, UserRole.DivisionCC}

# Staff directory and user deletion
DIRECTORY_ROLES = {UserRole.Admin, UserRole.HOD, UserRole.DivisionalHead, UserRole.DivisionCC}
USER_DELETE_ROLES = {UserRole.Admin, UserRole.HOD}

DIVISION_NAME_MIN_LENGTH = 2
