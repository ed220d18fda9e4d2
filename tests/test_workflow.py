import pytest

from app.core.exceptions import AuthorizationError
from app.core.workflow import LEAVE_WORKFLOW, PROGRAM_WORKFLOW, Transition, Workflow, resolve_transition
from app.models.enums import LeaveStatus, ProgramStatus


def test_leave_transitions():
    assert resolve_transition(LEAVE_WORKFLOW, LeaveStatus.pending, "recommended").to_state == "recommended"
    assert resolve_transition(LEAVE_WORKFLOW, "recommended", "approved").to_state == "approved"

    rejected = resolve_transition(LEAVE_WORKFLOW, LeaveStatus.pending, "not_recommended")
    assert rejected.to_state == "rejected"
    assert rejected.requires_comment

    assert resolve_transition(LEAVE_WORKFLOW, LeaveStatus.recommended, "not_approved").requires_comment


def test_leave_stage_mismatch_and_terminal():
    with pytest.raises(AuthorizationError):
        resolve_transition(LEAVE_WORKFLOW, LeaveStatus.pending, "approved")
    with pytest.raises(AuthorizationError):
        resolve_transition(LEAVE_WORKFLOW, LeaveStatus.recommended, "recommended")
    for state in (LeaveStatus.approved, LeaveStatus.rejected):
        with pytest.raises(AuthorizationError):
            resolve_transition(LEAVE_WORKFLOW, state, "recommended")


def test_program_transitions():
    assert resolve_transition(PROGRAM_WORKFLOW, ProgramStatus.draft, "submit").to_state == "submitted"
    assert resolve_transition(PROGRAM_WORKFLOW, ProgramStatus.draft, "save").to_state == "draft"
    assert resolve_transition(PROGRAM_WORKFLOW, ProgramStatus.submitted, "rejected").to_state == "rejected"

    with pytest.raises(AuthorizationError):
        resolve_transition(PROGRAM_WORKFLOW, ProgramStatus.draft, "approved")
    with pytest.raises(AuthorizationError):
        resolve_transition(PROGRAM_WORKFLOW, ProgramStatus.submitted, "save")
    with pytest.raises(AuthorizationError):
        resolve_transition(PROGRAM_WORKFLOW, ProgramStatus.approved, "rejected")


def test_workflow_definition_is_checked():
    with pytest.raises(ValueError):
        Workflow("broken", "start", ("a", "b"), ())
    with pytest.raises(ValueError):
        Workflow("broken", "a", ("a", "b"), (Transition("a", "c", "go"),))
    with pytest.raises(ValueError):
        Workflow("broken", "a", ("a", "b"), (Transition("b", "a", "undo"),), terminal_states=("b",))
