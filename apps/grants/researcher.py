from models.grants import CallForPapers, CallStatus, Proposal, ProposalStatus
from models.user import Role

from ..common import json_response, require_role
from ..common.session import current_session
from ..common.store import store
from . import call_data, grants, lifecycle, profile_data, proposal_data
from .forms import SubmitProposalForm

APPROVED_STATES = [ProposalStatus.APPROVED, ProposalStatus.BUDGET_APPROVED]


def researcher_view(ctx):
    calls = store.read(
        CallForPapers,
        CallForPapers.status == CallStatus.OPEN,
        order_by=(CallForPapers.created_at.desc(), CallForPapers.id.desc()),
    )
    proposals = store.read(
        Proposal,
        Proposal.researcher_id == ctx.user_id,
        order_by=(Proposal.submitted_at.desc(), Proposal.id.desc()),
    )

    return {
        "profile": profile_data(ctx.profile),
        "calls": [call_data(ctx, c) for c in calls],
        "proposals": [proposal_data(ctx, p) for p in proposals],
        "counts": {
            "total": len(proposals),
            "under_review": len([p for p in proposals if p.status == ProposalStatus.UNDER_REVIEW]),
            "approved": len([p for p in proposals if p.status in APPROVED_STATES]),
        },
    }


@grants.route("/researcher")
@json_response
@require_role(Role.RESEARCHER)
def researcher():
    return researcher_view(current_session())


@grants.route("/researcher/calls/<int:call_id>/proposals", methods=["POST"])
@json_response
@require_role(Role.RESEARCHER)
def submit_proposal(call_id):
    form = SubmitProposalForm()
    if not form.validate_on_submit():
        return {"errors": form.errors}, 400

    ctx = current_session()
    lifecycle.submit_proposal(
        ctx,
        call_id,
        title=form.title.data,
        abstract=form.abstract.data,
        methodology=form.methodology.data,
        budget_amount=form.budget_amount.data,
    )
    return researcher_view(ctx)
