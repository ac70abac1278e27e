"""
End-to-end run of one proposal through every role's dashboard:

1. A director opens a call
2. A researcher submits a proposal against it
3. A coordinator assigns a reviewer, who scores it
4. The director approves it and requests its budget
5. The vice-president approves the budget
"""

import random

from sqlalchemy import func, select

from models.grants import BudgetRequest, Proposal, ProposalStatus
from models.user import Role

from _utils import login


def find(items, id):
    return next(item for item in items if item["id"] == id)


def test_grant_lifecycle(client, make_user):
    director = make_user(Role.DIRECTOR)
    researcher = make_user(Role.RESEARCHER)
    coordinator = make_user(Role.COORDINATOR)
    reviewer = make_user(Role.REVIEWER)
    vice_president = make_user(Role.VICE_PRESIDENT)

    login(client, director)
    rv = client.post(
        "/director/calls",
        data={"title": "Ocean sensing", "description": "Low cost buoys", "deadline": "2026-08-01 12:00"},
    )
    assert rv.status_code == 200
    call_id = next(c["id"] for c in rv.get_json()["calls"] if c["title"] == "Ocean sensing")

    login(client, researcher)
    data = client.get("/researcher").get_json()
    assert find(data["calls"], call_id)["actions"] == ["submit_proposal"]

    rv = client.post(
        f"/researcher/calls/{call_id}/proposals",
        data={
            "title": "Solar buoys",
            "abstract": "Buoys which charge themselves",
            "methodology": "Build ten, deploy ten",
            "budget_amount": "75000",
        },
    )
    data = rv.get_json()
    proposal_id = data["proposals"][0]["id"]
    assert data["counts"] == {"total": 1, "under_review": 0, "approved": 0}

    login(client, coordinator)
    data = client.get("/coordinator").get_json()
    assert find(data["proposals"], proposal_id)["actions"] == ["assign_reviewer"]

    rv = client.post(f"/proposals/{proposal_id}/reviewers", data={"reviewer_id": reviewer.id})
    assert find(rv.get_json()["proposals"], proposal_id)["status"] == "under_review"

    login(client, researcher)
    assert client.get("/researcher").get_json()["counts"]["under_review"] == 1

    login(client, reviewer)
    data = client.get("/reviewer").get_json()
    assert data["counts"] == {"assigned": 1, "pending": 1, "completed": 0}

    rv = client.post(
        f"/reviewer/proposals/{proposal_id}/review",
        data={"score": "82", "recommendation": "approve", "comments": "Clear plan, sensible costs"},
    )
    assert rv.get_json()["counts"] == {"assigned": 1, "pending": 0, "completed": 1}

    login(client, director)
    rv = client.post(f"/director/proposals/{proposal_id}/decision", data={"decision": "approved"})
    assert find(rv.get_json()["proposals"], proposal_id)["status"] == "approved"

    rv = client.post(
        f"/director/proposals/{proposal_id}/budget-request",
        data={"requested_amount": "70000", "justification": "Ten buoys, less shared tooling"},
    )
    assert find(rv.get_json()["proposals"], proposal_id)["status"] == "budget_requested"

    login(client, vice_president)
    data = client.get("/vice-president").get_json()
    request = next(r for r in data["budget_requests"] if r["proposal_id"] == proposal_id)
    assert request["status"] == "pending"
    assert request["requested_amount"] == "70000.00"

    rv = client.post(f"/vice-president/budget-requests/{request['id']}/decision", data={"decision": "approved"})
    request = find(rv.get_json()["budget_requests"], request["id"])
    assert request["status"] == "approved"
    assert request["approved_by"] == vice_president.id

    login(client, researcher)
    data = client.get("/researcher").get_json()
    assert find(data["proposals"], proposal_id)["status"] == "budget_approved"
    assert data["counts"] == {"total": 1, "under_review": 0, "approved": 1}


def test_dev_data(app, db):
    random.seed(1)
    result = app.test_cli_runner().invoke(args=["dev", "data"])
    assert result.exit_code == 0, result.output

    proposals = db.session.scalar(select(func.count()).select_from(Proposal))
    assert proposals > 0

    # Every approved budget moved its proposal on
    approved = db.session.scalars(select(BudgetRequest).where(BudgetRequest.status == "approved")).all()
    assert all(r.proposal.status == ProposalStatus.BUDGET_APPROVED for r in approved)
