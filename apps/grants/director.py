from models.grants import CallForPapers, Proposal, ProposalStatus
from models.user import Role

from ..common import json_response, require_role
from ..common.session import current_session
from ..common.store import store
from . import call_data, grants, lifecycle, profile_data, proposal_data
from .forms import BudgetRequestForm, CreateCallForm, DecisionForm

PENDING_REVIEW_STATES = [ProposalStatus.SUBMITTED, ProposalStatus.UNDER_REVIEW]


def director_view(ctx):
    calls = store.read(CallForPapers, order_by=(CallForPapers.created_at.desc(), CallForPapers.id.desc()))
    proposals = store.read(Proposal, order_by=(Proposal.submitted_at.desc(), Proposal.id.desc()))

    return {
        "profile": profile_data(ctx.profile),
        "actions": ["create_call"],
        "calls": [call_data(ctx, c) for c in calls],
        "proposals": [proposal_data(ctx, p) for p in proposals],
        "counts": {
            "calls": len(calls),
            "proposals": len(proposals),
            "pending_review": len([p for p in proposals if p.status in PENDING_REVIEW_STATES]),
        },
    }


@grants.route("/director")
@json_response
@require_role(Role.DIRECTOR)
def director():
    return director_view(current_session())


@grants.route("/director/calls", methods=["POST"])
@json_response
@require_role(Role.DIRECTOR)
def create_call():
    form = CreateCallForm()
    if not form.validate_on_submit():
        return {"errors": form.errors}, 400

    ctx = current_session()
    lifecycle.create_call(
        ctx,
        title=form.title.data,
        description=form.description.data,
        deadline=form.deadline.data,
    )
    return director_view(ctx)


@grants.route("/director/proposals/<int:proposal_id>/decision", methods=["POST"])
@json_response
@require_role(Role.DIRECTOR)
def decide_proposal(proposal_id):
    form = DecisionForm()
    if not form.validate_on_submit():
        return {"errors": form.errors}, 400

    ctx = current_session()
    lifecycle.decide_proposal(ctx, proposal_id, form.decision.data)
    return director_view(ctx)


@grants.route("/director/proposals/<int:proposal_id>/budget-request", methods=["POST"])
@json_response
@require_role(Role.DIRECTOR)
def request_budget(proposal_id):
    form = BudgetRequestForm()
    if not form.validate_on_submit():
        return {"errors": form.errors}, 400

    ctx = current_session()
    amount = form.requested_amount.data
    if amount is None:
        amount = store.get(Proposal, proposal_id).budget_amount

    lifecycle.request_budget(ctx, proposal_id, amount, form.justification.data)
    return director_view(ctx)
