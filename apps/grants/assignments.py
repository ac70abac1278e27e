from models.user import Role

from ..common import json_response, require_role
from ..common.session import current_session
from . import grants, lifecycle, profile_data
from .coordinator import coordinator_view
from .director import director_view
from .forms import AssignReviewerForm


def assigner_view(ctx):
    if ctx.has_role(Role.DIRECTOR):
        return director_view(ctx)
    return coordinator_view(ctx)


@grants.route("/proposals/<int:proposal_id>/reviewers", methods=["GET", "POST"])
@json_response
@require_role(*lifecycle.ASSIGNERS)
def reviewers(proposal_id):
    ctx = current_session()
    form = AssignReviewerForm()

    if form.validate_on_submit():
        lifecycle.assign_reviewer(ctx, proposal_id, form.reviewer_id.data)
        return assigner_view(ctx)

    if form.is_submitted():
        return {"errors": form.errors}, 400

    grouped = lifecycle.list_reviewers(ctx, proposal_id)
    return {key: [profile_data(r) for r in profiles] for key, profiles in grouped.items()}


@grants.route("/proposals/<int:proposal_id>/reviewers/<int:reviewer_id>", methods=["DELETE"])
@json_response
@require_role(*lifecycle.ASSIGNERS)
def unassign_reviewer(proposal_id, reviewer_id):
    ctx = current_session()
    lifecycle.unassign_reviewer(ctx, proposal_id, reviewer_id)
    return assigner_view(ctx)
