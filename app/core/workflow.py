# app/core/workflow.py
"""
Status machines for leave applications and advanced program entries.

Transitions are declared once as frozen value objects; services ask
``resolve_transition`` for the target status instead of comparing
strings inline. An action that is not declared for the current status
is rejected with AuthorizationError and nothing is written.
"""

from __future__ import annotations

from dataclasses import dataclass

from app.core.exceptions import AuthorizationError
from app.models.enums import LeaveStatus, ProgramStatus


@dataclass(frozen=True)
class Transition:
    from_state: str
    to_state: str
    action: str
    requires_comment: bool = False


@dataclass(frozen=True)
class Workflow:
    name: str
    initial_state: str
    states: tuple[str, ...]
    transitions: tuple[Transition, ...]
    terminal_states: tuple[str, ...] = ()

    def __post_init__(self):
        if self.initial_state not in self.states:
            raise ValueError(f"{self.name}: initial state '{self.initial_state}' is not a state")
        for t in self.transitions:
            if t.from_state not in self.states or t.to_state not in self.states:
                raise ValueError(f"{self.name}: transition '{t.action}' references an unknown state")
            if t.from_state in self.terminal_states:
                raise ValueError(f"{self.name}: terminal state '{t.from_state}' has an outgoing transition")

    def is_terminal(self, state: str) -> bool:
        return state in self.terminal_states

    def find(self, from_state: str, action: str) -> Transition | None:
        for t in self.transitions:
            if t.from_state == from_state and t.action == action:
                return t
        return None


LEAVE_WORKFLOW = Workflow(
    name="leave",
    initial_state=LeaveStatus.pending.value,
    states=tuple(s.value for s in LeaveStatus),
    transitions=(
        Transition(LeaveStatus.pending.value, LeaveStatus.recommended.value, "recommended"),
        # a not-recommended application never reaches the approver
        Transition(LeaveStatus.pending.value, LeaveStatus.rejected.value, "not_recommended", requires_comment=True),
        Transition(LeaveStatus.recommended.value, LeaveStatus.approved.value, "approved"),
        Transition(LeaveStatus.recommended.value, LeaveStatus.rejected.value, "not_approved", requires_comment=True),
    ),
    terminal_states=(LeaveStatus.approved.value, LeaveStatus.rejected.value),
)


PROGRAM_WORKFLOW = Workflow(
    name="advanced_program",
    initial_state=ProgramStatus.draft.value,
    states=tuple(s.value for s in ProgramStatus),
    transitions=(
        Transition(ProgramStatus.draft.value, ProgramStatus.draft.value, "save"),
        Transition(ProgramStatus.draft.value, ProgramStatus.submitted.value, "submit"),
        Transition(ProgramStatus.submitted.value, ProgramStatus.approved.value, "approved"),
        Transition(ProgramStatus.submitted.value, ProgramStatus.rejected.value, "rejected"),
    ),
    terminal_states=(ProgramStatus.approved.value, ProgramStatus.rejected.value),
)


def _value(state) -> str:
    return state.value if hasattr(state, "value") else str(state)


def resolve_transition(workflow: Workflow, current_state, action: str) -> Transition:
    state = _value(current_state)
    if workflow.is_terminal(state):
        raise AuthorizationError(
            f"This {workflow.name.replace('_', ' ')} record is already {state} and can no longer be changed."
        )
    transition = workflow.find(state, _value(action))
    if transition is None:
        raise AuthorizationError(
            f"Action '{_value(action)}' is not allowed while the record is {state}."
        )
    return transition
