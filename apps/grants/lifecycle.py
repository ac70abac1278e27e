"""
Proposal and budget request lifecycle.

Every operation:
  - takes the caller's SessionContext and checks their role
  - loads the records involved and checks their current state
  - makes all of its writes inside one store transaction, so a failure
    part-way through leaves nothing behind

Usage:
    from apps.grants import lifecycle

    lifecycle.assign_reviewer(ctx, proposal_id=4, reviewer_id=12)
"""

import logging
from decimal import Decimal, InvalidOperation

from logger import transition_logging
from models import naive_utcnow
from models.exc import PermissionDenied, RecordNotFound, SubmissionInvalid
from models.grants import (
    ASSIGNABLE_STATES,
    BUDGET_DECISIONS,
    PROPOSAL_DECISIONS,
    SCORE_MAX,
    SCORE_MIN,
    BudgetRequest,
    BudgetStatus,
    CallForPapers,
    GrantStateException,
    Proposal,
    ProposalReviewer,
    ProposalStatus,
    Recommendation,
    Review,
)
from models.user import Role, User

from ..common.store import store

logger = logging.getLogger(__name__)

# Roles which manage reviewer assignments
ASSIGNERS = (Role.DIRECTOR, Role.COORDINATOR)


def validate_score(score) -> int:
    if isinstance(score, bool) or not isinstance(score, int):
        raise SubmissionInvalid("Score must be a whole number")
    if not SCORE_MIN <= score <= SCORE_MAX:
        raise SubmissionInvalid(f"Score must be between {SCORE_MIN} and {SCORE_MAX}")
    return score


def validate_amount(amount, name="Amount") -> Decimal:
    try:
        amount = Decimal(str(amount))
    except InvalidOperation as e:
        raise SubmissionInvalid(f"{name} must be a number") from e

    if not amount.is_finite():
        raise SubmissionInvalid(f"{name} must be a number")
    if amount < 0:
        raise SubmissionInvalid(f"{name} must not be negative")
    return amount.quantize(Decimal("0.01"))


def required_text(value, name) -> str:
    if value is None or not str(value).strip():
        raise SubmissionInvalid(f"{name} is required")
    return value


def _choice(enum_cls, value, allowed, name):
    try:
        value = enum_cls(value)
    except ValueError as e:
        raise SubmissionInvalid(f'"{value}" is not a valid {name}') from e
    if value not in allowed:
        raise SubmissionInvalid(f'"{value}" is not a valid {name}')
    return value


def create_call(ctx, title, description, deadline) -> CallForPapers:
    ctx.require_role(Role.DIRECTOR)
    required_text(title, "Title")
    required_text(description, "Description")
    if deadline is None:
        raise SubmissionInvalid("A deadline is required")

    with store.transaction():
        call = store.insert(
            CallForPapers(
                title=title,
                description=description,
                deadline=deadline,
                created_by=ctx.user_id,
            )
        )

    logger.info("Call %s created by %s", call.id, ctx.user_id)
    return call


def submit_proposal(ctx, call_id, title, abstract, methodology, budget_amount) -> Proposal:
    ctx.require_role(Role.RESEARCHER)
    required_text(title, "Title")
    required_text(abstract, "Abstract")
    required_text(methodology, "Methodology")
    budget_amount = validate_amount(budget_amount, "Budget amount")

    with store.transaction():
        call = store.get(CallForPapers, call_id)
        if not call.is_open:
            raise GrantStateException(f"Call {call.id} is {call.status} and not taking proposals")

        proposal = store.insert(
            Proposal(
                call_id=call.id,
                researcher_id=ctx.user_id,
                title=title,
                abstract=abstract,
                methodology=methodology,
                budget_amount=budget_amount,
                status=ProposalStatus.SUBMITTED,
            )
        )

    logger.info("Proposal %s submitted to call %s by %s", proposal.id, call_id, ctx.user_id)
    return proposal


def assign_reviewer(ctx, proposal_id, reviewer_id) -> ProposalReviewer:
    """Assign a reviewer and put the proposal under review.

    Assigning further reviewers to a proposal already under review is
    allowed; assigning the same reviewer twice is not.
    """
    ctx.require_role(*ASSIGNERS)

    with store.transaction():
        proposal = store.get(Proposal, proposal_id)
        reviewer = store.get(User, reviewer_id)

        if reviewer.role != Role.REVIEWER:
            raise SubmissionInvalid(f"{reviewer.full_name} is not a reviewer")

        if proposal.status not in ASSIGNABLE_STATES:
            raise GrantStateException(f"Reviewers can't be assigned to a proposal which is {proposal.status}")

        if proposal.get_assignment(reviewer) is not None:
            raise GrantStateException(f"{reviewer.full_name} is already assigned to proposal {proposal.id}")

        assignment = store.insert(
            ProposalReviewer(proposal_id=proposal.id, reviewer_id=reviewer.id, assigned_by=ctx.user_id)
        )

        old_status = proposal.status
        proposal.set_status(ProposalStatus.UNDER_REVIEW)
        store.update(proposal, updated_at=naive_utcnow())

    transition_logging(logger, proposal, old_status, ProposalStatus.UNDER_REVIEW, ctx)
    return assignment


def unassign_reviewer(ctx, proposal_id, reviewer_id):
    """Remove a reviewer. The proposal stays in whatever state it's in."""
    ctx.require_role(*ASSIGNERS)

    with store.transaction():
        proposal = store.get(Proposal, proposal_id)
        deleted = store.delete(
            ProposalReviewer,
            ProposalReviewer.proposal_id == proposal.id,
            ProposalReviewer.reviewer_id == reviewer_id,
        )
        if not deleted:
            raise RecordNotFound(ProposalReviewer, reviewer_id)

    logger.info("Reviewer %s removed from proposal %s by %s", reviewer_id, proposal_id, ctx.user_id)


def list_reviewers(ctx, proposal_id) -> dict[str, list[User]]:
    ctx.require_role(*ASSIGNERS)

    proposal = store.get(Proposal, proposal_id)
    assigned_ids = {a.reviewer_id for a in proposal.assignments}
    reviewers = User.reviewers()

    return {
        "assigned": [r for r in reviewers if r.id in assigned_ids],
        "available": [r for r in reviewers if r.id not in assigned_ids],
    }


def decide_proposal(ctx, proposal_id, decision) -> Proposal:
    ctx.require_role(Role.DIRECTOR)
    decision = _choice(ProposalStatus, decision, PROPOSAL_DECISIONS, "decision")

    with store.transaction():
        proposal = store.get(Proposal, proposal_id)
        old_status = proposal.status
        proposal.set_status(decision)
        store.update(proposal, updated_at=naive_utcnow())

    transition_logging(logger, proposal, old_status, decision, ctx)
    return proposal


def request_budget(ctx, proposal_id, amount, justification) -> BudgetRequest:
    """Raise a pending budget request for an approved proposal.

    The request row and the proposal's move to budget_requested are
    written together; if either fails neither is kept.
    """
    ctx.require_role(Role.DIRECTOR)
    amount = validate_amount(amount, "Requested amount")
    required_text(justification, "Justification")

    with store.transaction():
        proposal = store.get(Proposal, proposal_id)
        proposal.check_status(ProposalStatus.BUDGET_REQUESTED)

        budget_request = store.insert(
            BudgetRequest(
                proposal_id=proposal.id,
                requested_amount=amount,
                justification=justification,
                requested_by=ctx.user_id,
                status=BudgetStatus.PENDING,
            )
        )

        old_status = proposal.status
        proposal.set_status(ProposalStatus.BUDGET_REQUESTED)
        store.update(proposal, updated_at=naive_utcnow())

    transition_logging(logger, proposal, old_status, ProposalStatus.BUDGET_REQUESTED, ctx)
    return budget_request


def decide_budget(ctx, request_id, decision) -> BudgetRequest:
    """Approve or reject a pending budget request.

    Approval also moves the proposal on to budget_approved. Rejection only
    touches the request, so the proposal stays at budget_requested.
    """
    ctx.require_role(Role.VICE_PRESIDENT)
    decision = _choice(BudgetStatus, decision, BUDGET_DECISIONS, "decision")

    with store.transaction():
        budget_request = store.get(BudgetRequest, request_id)
        old_status = budget_request.status
        budget_request.set_status(decision)
        store.update(budget_request, approved_by=ctx.user_id, reviewed_at=naive_utcnow())

        if decision == BudgetStatus.APPROVED:
            proposal = budget_request.proposal
            proposal.set_status(ProposalStatus.BUDGET_APPROVED)
            store.update(proposal, updated_at=naive_utcnow())

    transition_logging(logger, budget_request, old_status, decision, ctx)
    return budget_request


def submit_review(ctx, proposal_id, score, recommendation, comments) -> Review:
    ctx.require_role(Role.REVIEWER)
    score = validate_score(score)
    recommendation = _choice(Recommendation, recommendation, list(Recommendation), "recommendation")
    required_text(comments, "Comments")

    with store.transaction():
        proposal = store.get(Proposal, proposal_id)

        if proposal.get_assignment(ctx.profile) is None:
            raise PermissionDenied(f"You are not assigned to review proposal {proposal.id}")

        if proposal.get_user_review(ctx.profile) is not None:
            raise GrantStateException(f"You have already reviewed proposal {proposal.id}")

        review = store.insert(
            Review(
                proposal_id=proposal.id,
                reviewer_id=ctx.user_id,
                score=score,
                recommendation=recommendation,
                comments=comments,
            )
        )

    logger.info("Review %s of proposal %s by %s: %s (%s)", review.id, proposal_id, ctx.user_id, score, recommendation)
    return review


def available_actions(ctx, proposal, assigned=False, reviewed=False) -> list[str]:
    """The actions the caller may take on a proposal, given its status.

    `assigned` and `reviewed` describe the caller's own assignment and
    review, and only matter to reviewers.
    """
    actions = []
    if ctx.has_role(*ASSIGNERS) and proposal.status in ASSIGNABLE_STATES:
        actions.append("assign_reviewer")

    if ctx.has_role(Role.DIRECTOR):
        if proposal.status == ProposalStatus.UNDER_REVIEW:
            actions += ["approve", "reject"]
        elif proposal.status == ProposalStatus.APPROVED:
            actions.append("request_budget")

    if ctx.has_role(Role.REVIEWER) and assigned and not reviewed:
        actions.append("submit_review")

    return actions


def call_actions(ctx, call) -> list[str]:
    if ctx.has_role(Role.RESEARCHER) and call.is_open:
        return ["submit_proposal"]
    return []


def budget_actions(ctx, budget_request) -> list[str]:
    if ctx.has_role(Role.VICE_PRESIDENT) and not budget_request.is_decided:
        return ["approve_budget", "reject_budget"]
    return []
