""" Role views over the grant workflow.

    Each role gets one read endpoint returning everything its screen shows,
    plus the actions the caller may take on each entity. Mutating endpoints
    hand their input to apps.grants.lifecycle and respond with a fresh
    reload of the same view.
"""

from flask import Blueprint, url_for

from models import to_dict

from .lifecycle import available_actions, budget_actions, call_actions

grants = Blueprint("grants", __name__)

# Each role's own view
DASHBOARDS = {
    "researcher": "grants.researcher",
    "reviewer": "grants.reviewer",
    "coordinator": "grants.coordinator",
    "director": "grants.director",
    "vice_president": "grants.vice_president",
}


def dashboard_url(role):
    return url_for(DASHBOARDS[role])


def profile_data(user):
    if user is None:
        return None
    return to_dict(user, exclude=("password_hash",))


def call_data(ctx, call):
    data = to_dict(call)
    data["actions"] = call_actions(ctx, call)
    return data


def proposal_data(ctx, proposal, assigned=False, reviewed=False):
    data = to_dict(proposal)
    data["researcher"] = profile_data(proposal.researcher)
    data["call_title"] = proposal.call.title
    data["actions"] = available_actions(ctx, proposal, assigned=assigned, reviewed=reviewed)
    return data


def budget_request_data(ctx, budget_request):
    data = to_dict(budget_request)
    data["proposal"] = to_dict(budget_request.proposal)
    data["actions"] = budget_actions(ctx, budget_request)
    return data


from . import researcher, reviewer, coordinator, director, vice_president, assignments  # noqa: F401,E402
