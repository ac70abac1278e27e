from decimal import Decimal

from models.grants import BudgetRequest, BudgetStatus
from models.user import Role

from ..common import json_response, require_role
from ..common.session import current_session
from ..common.store import store
from . import budget_request_data, grants, lifecycle, profile_data
from .forms import DecisionForm


def vice_president_view(ctx):
    budget_requests = store.read(
        BudgetRequest,
        order_by=(BudgetRequest.requested_at.desc(), BudgetRequest.id.desc()),
    )

    def with_status(status):
        return [r for r in budget_requests if r.status == status]

    approved = with_status(BudgetStatus.APPROVED)
    return {
        "profile": profile_data(ctx.profile),
        "budget_requests": [budget_request_data(ctx, r) for r in budget_requests],
        "counts": {
            "pending": len(with_status(BudgetStatus.PENDING)),
            "approved": len(approved),
            "rejected": len(with_status(BudgetStatus.REJECTED)),
            "approved_total": str(sum((r.requested_amount for r in approved), Decimal("0.00"))),
        },
    }


@grants.route("/vice-president")
@json_response
@require_role(Role.VICE_PRESIDENT)
def vice_president():
    return vice_president_view(current_session())


@grants.route("/vice-president/budget-requests/<int:request_id>/decision", methods=["POST"])
@json_response
@require_role(Role.VICE_PRESIDENT)
def decide_budget(request_id):
    form = DecisionForm()
    if not form.validate_on_submit():
        return {"errors": form.errors}, 400

    ctx = current_session()
    lifecycle.decide_budget(ctx, request_id, form.decision.data)
    return vice_president_view(ctx)
