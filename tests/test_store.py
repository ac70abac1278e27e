from datetime import datetime

import pytest
from sqlalchemy import select, text

from apps.common.store import store
from apps.grants import lifecycle
from models.exc import RecordNotFound, StoreError
from models.grants import (
    BudgetRequest,
    CallForPapers,
    GrantStateException,
    Proposal,
    ProposalStatus,
    Review,
)

from _utils import ctx_for


@pytest.fixture(scope="module")
def call(db, director):
    yield lifecycle.create_call(ctx_for(director), "Soil carbon", "Measuring soil carbon", datetime(2026, 5, 1))


@pytest.fixture
def approved_proposal(call, researcher, director, reviewer):
    proposal = lifecycle.submit_proposal(
        ctx_for(researcher), call.id, "Peat cores", "Abstract", "Coring", budget_amount=20000
    )
    lifecycle.assign_reviewer(ctx_for(director), proposal.id, reviewer.id)
    lifecycle.decide_proposal(ctx_for(director), proposal.id, "approved")
    return proposal


def test_get_missing_record(app):
    with pytest.raises(RecordNotFound) as e:
        store.get(Proposal, 424242)

    assert str(e.value) == "Proposal 424242 not found"
    # Callers can treat a missing record as any other store failure
    assert isinstance(e.value, StoreError)


def test_read_filters_and_orders(call, director):
    second = lifecycle.create_call(ctx_for(director), "Soil water", "Moisture", datetime(2026, 5, 2))

    calls = store.read(
        CallForPapers,
        CallForPapers.title.like("Soil%"),
        order_by=CallForPapers.id.desc(),
    )
    assert [c.id for c in calls] == [second.id, call.id]


def test_failed_second_write_rolls_back(db, monkeypatch, approved_proposal, director):
    real_update = store.update

    def failing_update(record, **patch):
        if isinstance(record, Proposal):
            raise StoreError("Simulated failure updating proposal")
        return real_update(record, **patch)

    monkeypatch.setattr(store, "update", failing_update)

    with pytest.raises(StoreError):
        lifecycle.request_budget(ctx_for(director), approved_proposal.id, 20000, "Drilling rig hire")

    monkeypatch.undo()

    # Neither write survives
    budget_requests = db.session.scalars(
        select(BudgetRequest).where(BudgetRequest.proposal_id == approved_proposal.id)
    ).all()
    assert budget_requests == []
    assert db.session.get(Proposal, approved_proposal.id).status == ProposalStatus.APPROVED

    # and the request can be retried
    lifecycle.request_budget(ctx_for(director), approved_proposal.id, 20000, "Drilling rig hire")
    assert approved_proposal.status == ProposalStatus.BUDGET_REQUESTED


def test_constraint_violation_is_store_error(db, approved_proposal, reviewer):
    with pytest.raises(StoreError):
        with store.transaction():
            store.insert(
                Review(
                    proposal_id=approved_proposal.id,
                    reviewer_id=reviewer.id,
                    score=150,
                    recommendation="approve",
                    comments="Out of range",
                )
            )

    assert approved_proposal.get_user_review(reviewer) is None


def test_status_check_constraint(db, approved_proposal):
    with pytest.raises(StoreError):
        with store.transaction():
            db.session.execute(
                text("UPDATE proposal SET status = 'archived' WHERE id = :id"),
                {"id": approved_proposal.id},
            )

    assert approved_proposal.status == ProposalStatus.APPROVED


def test_transaction_rolls_back_other_errors(db, approved_proposal):
    with pytest.raises(GrantStateException):
        with store.transaction():
            store.update(approved_proposal, title="Renamed")
            approved_proposal.set_status(ProposalStatus.SUBMITTED)

    assert approved_proposal.title == "Peat cores"


def test_delete_returns_rowcount(db, call, researcher):
    proposal = lifecycle.submit_proposal(ctx_for(researcher), call.id, "Throwaway", "A", "M", 1)

    with store.transaction():
        assert store.delete(Proposal, Proposal.id == proposal.id) == 1
    with store.transaction():
        assert store.delete(Proposal, Proposal.id == proposal.id) == 0
