from models.grants import ProposalReviewer, Review
from models.user import Role

from ..common import json_response, require_role
from ..common.session import current_session
from ..common.store import store
from . import grants, lifecycle, profile_data, proposal_data
from .forms import ReviewForm


def reviewer_view(ctx):
    assignments = store.read(
        ProposalReviewer,
        ProposalReviewer.reviewer_id == ctx.user_id,
        order_by=(ProposalReviewer.assigned_at.desc(), ProposalReviewer.id.desc()),
    )
    reviews = store.read(
        Review,
        Review.reviewer_id == ctx.user_id,
        order_by=(Review.submitted_at.desc(), Review.id.desc()),
    )
    reviewed_ids = {r.proposal_id for r in reviews}

    proposals = []
    for assignment in assignments:
        reviewed = assignment.proposal_id in reviewed_ids
        data = proposal_data(ctx, assignment.proposal, assigned=True, reviewed=reviewed)
        data["assigned_at"] = assignment.assigned_at.isoformat()
        data["reviewed"] = reviewed
        proposals.append(data)

    return {
        "profile": profile_data(ctx.profile),
        "proposals": proposals,
        "reviews": [
            {
                "id": r.id,
                "proposal_id": r.proposal_id,
                "proposal_title": r.proposal.title,
                "score": r.score,
                "recommendation": r.recommendation.value,
                "comments": r.comments,
                "submitted_at": r.submitted_at.isoformat(),
            }
            for r in reviews
        ],
        "counts": {
            "assigned": len(assignments),
            "pending": len([a for a in assignments if a.proposal_id not in reviewed_ids]),
            "completed": len(reviews),
        },
    }


@grants.route("/reviewer")
@json_response
@require_role(Role.REVIEWER)
def reviewer():
    return reviewer_view(current_session())


@grants.route("/reviewer/proposals/<int:proposal_id>/review", methods=["POST"])
@json_response
@require_role(Role.REVIEWER)
def submit_review(proposal_id):
    form = ReviewForm()
    if not form.validate_on_submit():
        return {"errors": form.errors}, 400

    ctx = current_session()
    lifecycle.submit_review(
        ctx,
        proposal_id,
        score=form.score.data,
        recommendation=form.recommendation.data,
        comments=form.comments.data,
    )
    return reviewer_view(ctx)
