from models.grants import Proposal, ProposalStatus
from models.user import Role

from ..common import json_response, require_role
from ..common.session import current_session
from ..common.store import store
from . import grants, profile_data, proposal_data


def coordinator_view(ctx):
    proposals = store.read(Proposal, order_by=(Proposal.submitted_at.desc(), Proposal.id.desc()))

    return {
        "profile": profile_data(ctx.profile),
        "proposals": [proposal_data(ctx, p) for p in proposals],
        "counts": {
            "total": len(proposals),
            "submitted": len([p for p in proposals if p.status == ProposalStatus.SUBMITTED]),
            "under_review": len([p for p in proposals if p.status == ProposalStatus.UNDER_REVIEW]),
        },
    }


@grants.route("/coordinator")
@json_response
@require_role(Role.COORDINATOR)
def coordinator():
    return coordinator_view(current_session())
