# app/services/program_service.py
"""
Advanced program (monthly field schedule) workflow.

Entries are keyed by (user, date). The owner saves drafts and submits a
month; a division approver then approves or rejects each submitted day.
Batch operations write each date independently and report per-date
outcomes instead of failing as a whole.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, List, Optional
from uuid import UUID

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import scoping
from app.core.context import Actor
from app.core.exceptions import AuthorizationError, ConflictError, DependencyError, ValidationError
from app.core.permissions import can_decide_program, require
from app.core.workflow import PROGRAM_WORKFLOW, resolve_transition
from app.models.enums import NotificationKind, ProgramDecision, ProgramStatus
from app.models.program import AdvancedProgramEntry
from app.services import program_store
from app.services.audit_service import AuditEntry
from app.services.dispatch_service import WorkflowResult
from app.services.notification_service import NotificationRequest

# skip reasons reported back to the caller
SKIP_PAST = "past-date"
SKIP_EMPTY = "empty"
SKIP_LOCKED = "locked"
SKIP_OUTSIDE_MONTH = "outside-month"


@dataclass
class ProgramDraft:
    entry_date: date
    program_name: str = ""
    place: str = ""


@dataclass
class BatchOutcome:
    saved: List[AdvancedProgramEntry] = field(default_factory=list)
    skipped: List[dict] = field(default_factory=list)
    failed: List[dict] = field(default_factory=list)

    def skip(self, entry_date: date, reason: str):
        self.skipped.append({"date": entry_date, "reason": reason})

    def fail(self, entry_date: date, error: str):
        self.failed.append({"date": entry_date, "error": error})


def parse_month(month: str) -> tuple[int, int]:
    """'2025-03' -> (2025, 3)"""
    try:
        year_s, month_s = month.split("-")
        year, month_n = int(year_s), int(month_s)
        date(year, month_n, 1)
    except (ValueError, AttributeError):
        raise ValidationError(f"Invalid month '{month}', expected YYYY-MM.")
    return year, month_n


def _require_field_staff(actor: Actor):
    if not actor.is_field_staff:
        raise AuthorizationError("Advanced Program is only available for Field staff.")
    if not actor.division:
        raise ValidationError("You must be assigned to a division to plan an advanced program.")


# ---------------------------------------------------------
# OWNER: SAVE / SUBMIT
# ---------------------------------------------------------
async def _write_one(
    session: AsyncSession,
    actor: Actor,
    draft: ProgramDraft,
    action: str,
    outcome: BatchOutcome,
) -> None:
    program_name = (draft.program_name or "").strip()
    place = (draft.place or "").strip()
    if not program_name and not place:
        outcome.skip(draft.entry_date, SKIP_EMPTY)
        return

    existing = await program_store.get_entry(session, actor.id, draft.entry_date)
    if existing is not None and existing.status != ProgramStatus.draft:
        outcome.skip(draft.entry_date, SKIP_LOCKED)
        return

    target = ProgramStatus(resolve_transition(PROGRAM_WORKFLOW, ProgramStatus.draft, action).to_state)

    saved = await program_store.upsert_entry(
        session,
        actor.id,
        draft.entry_date,
        {
            "user_name": actor.name,
            "division": actor.division,
            "program_name": program_name,
            "place": place,
            "status": target,
        },
        existing=existing,
    )
    outcome.saved.append(saved)


async def _reload(session: AsyncSession, entries: List[AdvancedProgramEntry]) -> None:
    # a rollback expires every loaded instance
    for entry in entries:
        await session.refresh(entry)


async def _write_batch(
    session: AsyncSession,
    actor: Actor,
    month: str,
    drafts: Iterable[ProgramDraft],
    action: str,
    today: Optional[date] = None,
) -> BatchOutcome:
    _require_field_staff(actor)
    year, month_n = parse_month(month)
    start, end = scoping.month_bounds(year, month_n)
    today = today or date.today()
    outcome = BatchOutcome()

    drafts = list(drafts)
    seen = set()
    for draft in drafts:
        if draft.entry_date in seen:
            raise ValidationError(f"Date {draft.entry_date.isoformat()} appears more than once.")
        seen.add(draft.entry_date)

    rolled_back = False
    for draft in drafts:
        if not (start <= draft.entry_date < end):
            outcome.skip(draft.entry_date, SKIP_OUTSIDE_MONTH)
            continue
        if draft.entry_date < today:
            outcome.skip(draft.entry_date, SKIP_PAST)
            continue

        try:
            await _write_one(session, actor, draft, action, outcome)
        except (ConflictError, DependencyError) as e:
            rolled_back = True
            await session.rollback()
            outcome.fail(draft.entry_date, e.message)
            logger.warning(f"Program {action} for {actor.email} on {draft.entry_date}: {e.message}")
        except IntegrityError:
            # another request created the same (user, date) first
            rolled_back = True
            await session.rollback()
            outcome.fail(draft.entry_date, "An entry for this date was created concurrently. Please refresh.")
            logger.warning(f"Program {action} for {actor.email} on {draft.entry_date}: duplicate insert")

    if rolled_back:
        await _reload(session, outcome.saved)
    return outcome


async def save_program(
    session: AsyncSession,
    actor: Actor,
    month: str,
    drafts: Iterable[ProgramDraft],
    today: Optional[date] = None,
) -> BatchOutcome:
    outcome = await _write_batch(session, actor, month, drafts, "save", today)
    logger.info(
        f"Program drafts for {actor.email} {month}: "
        f"{len(outcome.saved)} saved, {len(outcome.skipped)} skipped, {len(outcome.failed)} failed"
    )
    return outcome


async def submit_program(
    session: AsyncSession,
    actor: Actor,
    month: str,
    drafts: Iterable[ProgramDraft],
    today: Optional[date] = None,
) -> BatchOutcome:
    drafts = list(drafts)
    today = today or date.today()

    # drafts already stored for the month but not resent are submitted as well
    _require_field_staff(actor)
    year, month_n = parse_month(month)
    listed = {d.entry_date for d in drafts}
    for stored in await program_store.query_entries(session, scoping.own_programs(actor, year, month_n)):
        if stored.status == ProgramStatus.draft and stored.entry_date not in listed and stored.entry_date >= today:
            drafts.append(ProgramDraft(stored.entry_date, stored.program_name, stored.place))

    outcome = await _write_batch(session, actor, month, drafts, "submit", today)
    logger.info(
        f"Program submitted for {actor.email} {month}: "
        f"{len(outcome.saved)} submitted, {len(outcome.skipped)} skipped, {len(outcome.failed)} failed"
    )
    return outcome


async def list_my_program(session: AsyncSession, actor: Actor, month: str) -> List[AdvancedProgramEntry]:
    year, month_n = parse_month(month)
    return await program_store.query_entries(session, scoping.own_programs(actor, year, month_n))


# ---------------------------------------------------------
# APPROVER
# ---------------------------------------------------------
async def list_for_approval(
    session: AsyncSession, actor: Actor, month: str, division: Optional[str] = None
) -> List[AdvancedProgramEntry]:
    year, month_n = parse_month(month)
    return await program_store.query_entries(
        session, scoping.programs_for_approval(actor, year, month_n, division)
    )


async def decide_entry(
    session: AsyncSession,
    actor: Actor,
    entry_id: UUID,
    decision: ProgramDecision,
) -> WorkflowResult:
    entry = await program_store.require_entry(session, entry_id)
    require(can_decide_program(actor, entry), "You are not authorized to decide on this program entry.")

    decision = ProgramDecision(decision)
    transition = resolve_transition(PROGRAM_WORKFLOW, entry.status, decision.value)

    entry = await program_store.update_entry(
        session,
        entry.id,
        {
            "status": ProgramStatus(transition.to_state),
            "decided_by": actor.id,
            "decided_at": datetime.utcnow(),
        },
        expected_status=ProgramStatus.submitted,
    )
    logger.info(f"Program entry {entry.id} ({entry.entry_date}) {entry.status.value} by {actor.email}")

    return WorkflowResult(
        record=entry,
        notifications=[
            NotificationRequest(
                NotificationKind.program_decided,
                entry.user_id,
                {"entryId": str(entry.id), "date": entry.entry_date.isoformat(), "status": entry.status.value},
            )
        ],
        audit=[
            AuditEntry(
                f"program.{decision.value}",
                "program",
                str(entry.id),
                details={"from": ProgramStatus.submitted.value, "to": entry.status.value},
            )
        ],
    )


async def decide_month(
    session: AsyncSession,
    actor: Actor,
    user_id: UUID,
    month: str,
    decision: ProgramDecision,
) -> tuple[BatchOutcome, WorkflowResult]:
    """Approve or reject every submitted day of one user's month, each independently."""
    year, month_n = parse_month(month)
    pending = await program_store.query_entries(
        session, scoping.programs_for_approval(actor, year, month_n)
    )

    targets = [(e.id, e.entry_date) for e in pending if e.user_id == user_id]

    outcome = BatchOutcome()
    combined = WorkflowResult(record=None)
    rolled_back = False
    for entry_id, entry_date in targets:
        try:
            result = await decide_entry(session, actor, entry_id, decision)
        except (AuthorizationError, ConflictError, DependencyError) as e:
            rolled_back = True
            await session.rollback()
            outcome.fail(entry_date, e.message)
            logger.warning(f"Program decision on {entry_date} for user {user_id}: {e.message}")
            continue
        outcome.saved.append(result.record)
        combined.notifications.extend(result.notifications)
        combined.audit.extend(result.audit)

    if rolled_back:
        await _reload(session, outcome.saved)
    combined.record = outcome.saved
    return outcome, combined
