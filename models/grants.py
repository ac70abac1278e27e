from __future__ import annotations

import enum
import typing
from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, ForeignKey, Numeric, UniqueConstraint, select
from sqlalchemy.orm import Mapped, mapped_column, relationship

from main import db

from . import BaseModel, naive_utcnow

if typing.TYPE_CHECKING:
    from .user import User

__all__ = [
    "BudgetRequest",
    "BudgetStatus",
    "CallForPapers",
    "CallStatus",
    "Proposal",
    "ProposalReviewer",
    "ProposalStatus",
    "Recommendation",
    "Review",
]


class CallStatus(enum.StrEnum):
    OPEN = "open"
    CLOSED = "closed"


class ProposalStatus(enum.StrEnum):
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    BUDGET_REQUESTED = "budget_requested"
    BUDGET_APPROVED = "budget_approved"


class Recommendation(enum.StrEnum):
    APPROVE = "approve"
    REJECT = "reject"
    REVISE = "revise"


class BudgetStatus(enum.StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# state: [allowed next state, ] pairs
PROPOSAL_STATES: dict[ProposalStatus, list[ProposalStatus]] = {
    ProposalStatus.SUBMITTED: [ProposalStatus.UNDER_REVIEW],
    # Assigning a second reviewer re-enters under_review
    ProposalStatus.UNDER_REVIEW: [
        ProposalStatus.UNDER_REVIEW,
        ProposalStatus.APPROVED,
        ProposalStatus.REJECTED,
    ],
    ProposalStatus.APPROVED: [ProposalStatus.BUDGET_REQUESTED],
    ProposalStatus.REJECTED: [],
    # A rejected budget request leaves the proposal here, with nowhere to go
    ProposalStatus.BUDGET_REQUESTED: [ProposalStatus.BUDGET_APPROVED],
    ProposalStatus.BUDGET_APPROVED: [],
}

BUDGET_STATES: dict[BudgetStatus, list[BudgetStatus]] = {
    BudgetStatus.PENDING: [BudgetStatus.APPROVED, BudgetStatus.REJECTED],
    BudgetStatus.APPROVED: [],
    BudgetStatus.REJECTED: [],
}

# Reviewers can be added while a proposal is still being looked at
ASSIGNABLE_STATES = [ProposalStatus.SUBMITTED, ProposalStatus.UNDER_REVIEW]
PROPOSAL_DECISIONS = [ProposalStatus.APPROVED, ProposalStatus.REJECTED]
BUDGET_DECISIONS = [BudgetStatus.APPROVED, BudgetStatus.REJECTED]

SCORE_MIN = 0
SCORE_MAX = 100


class GrantStateException(ValueError):
    """Raised when a proposal is moved to an invalid state."""


class BudgetStateException(GrantStateException):
    """Raised when a budget request is moved to an invalid state."""


def status_type(enum_cls, name):
    # Stored as the literal value, with a CHECK constraint so nothing else can be written
    return db.Enum(
        enum_cls,
        name=name,
        native_enum=False,
        create_constraint=True,
        values_callable=lambda e: [m.value for m in e],
    )


def _coerce_status(enum_cls, state, exc_cls):
    if isinstance(state, str) and not isinstance(state, enum_cls):
        try:
            state = enum_cls(state.lower())
        except ValueError as e:
            raise exc_cls(f'"{state}" is not a valid state') from e
    return state


class CallForPapers(BaseModel):
    __tablename__ = "call_for_papers"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str]
    description: Mapped[str]
    deadline: Mapped[datetime]
    status: Mapped[CallStatus] = mapped_column(status_type(CallStatus, "call_status"), default=CallStatus.OPEN)
    created_by: Mapped[int] = mapped_column(ForeignKey("user.id"))
    created_at: Mapped[datetime] = mapped_column(default=naive_utcnow)

    creator: Mapped[User] = relationship(back_populates="calls_created")
    proposals: Mapped[list[Proposal]] = relationship(back_populates="call", lazy="dynamic")

    def __repr__(self):
        return f"<CallForPapers {self.id} {self.status}>"

    @property
    def is_open(self) -> bool:
        return self.status == CallStatus.OPEN


class Proposal(BaseModel):
    __tablename__ = "proposal"
    __table_args__ = (CheckConstraint("budget_amount >= 0", name="budget_amount_non_negative"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    call_id: Mapped[int] = mapped_column(ForeignKey("call_for_papers.id"), index=True)
    researcher_id: Mapped[int] = mapped_column(ForeignKey("user.id"), index=True)
    title: Mapped[str]
    abstract: Mapped[str]
    methodology: Mapped[str]
    budget_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    status: Mapped[ProposalStatus] = mapped_column(
        status_type(ProposalStatus, "proposal_status"), default=ProposalStatus.SUBMITTED
    )
    submitted_at: Mapped[datetime] = mapped_column(default=naive_utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=naive_utcnow, onupdate=naive_utcnow)

    call: Mapped[CallForPapers] = relationship(back_populates="proposals")
    researcher: Mapped[User] = relationship(back_populates="proposals")
    assignments: Mapped[list[ProposalReviewer]] = relationship(
        back_populates="proposal", cascade="all, delete-orphan"
    )
    reviews: Mapped[list[Review]] = relationship(back_populates="proposal", cascade="all, delete-orphan")
    budget_requests: Mapped[list[BudgetRequest]] = relationship(
        back_populates="proposal", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Proposal {self.id} {self.status}>"

    def valid_statuses(self) -> list[ProposalStatus]:
        return PROPOSAL_STATES[self.status]

    def check_status(self, status: str | ProposalStatus) -> ProposalStatus:
        status = _coerce_status(ProposalStatus, status, GrantStateException)
        if status not in self.valid_statuses():
            raise GrantStateException(f'"{self.status}->{status}" is not a valid transition')
        return status

    def set_status(self, status: str | ProposalStatus):
        self.status = self.check_status(status)

    def get_assignment(self, reviewer: User) -> ProposalReviewer | None:
        return db.session.scalars(
            select(ProposalReviewer).where(
                ProposalReviewer.proposal_id == self.id,
                ProposalReviewer.reviewer_id == reviewer.id,
            )
        ).first()

    def get_user_review(self, reviewer: User) -> Review | None:
        return db.session.scalars(
            select(Review).where(Review.proposal_id == self.id, Review.reviewer_id == reviewer.id)
        ).first()


class ProposalReviewer(BaseModel):
    __tablename__ = "proposal_reviewer"
    __table_args__ = (UniqueConstraint("proposal_id", "reviewer_id"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    proposal_id: Mapped[int] = mapped_column(ForeignKey("proposal.id"), index=True)
    reviewer_id: Mapped[int] = mapped_column(ForeignKey("user.id"), index=True)
    assigned_by: Mapped[int] = mapped_column(ForeignKey("user.id"))
    assigned_at: Mapped[datetime] = mapped_column(default=naive_utcnow)

    proposal: Mapped[Proposal] = relationship(back_populates="assignments")
    reviewer: Mapped[User] = relationship(back_populates="assignments", foreign_keys=[reviewer_id])
    assigner: Mapped[User] = relationship(foreign_keys=[assigned_by])

    def __repr__(self):
        return f"<ProposalReviewer proposal={self.proposal_id} reviewer={self.reviewer_id}>"


class Review(BaseModel):
    __tablename__ = "review"
    __table_args__ = (
        UniqueConstraint("proposal_id", "reviewer_id"),
        CheckConstraint(f"score >= {SCORE_MIN} AND score <= {SCORE_MAX}", name="score_range"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    proposal_id: Mapped[int] = mapped_column(ForeignKey("proposal.id"), index=True)
    reviewer_id: Mapped[int] = mapped_column(ForeignKey("user.id"), index=True)
    score: Mapped[int]
    recommendation: Mapped[Recommendation] = mapped_column(status_type(Recommendation, "recommendation"))
    comments: Mapped[str]
    submitted_at: Mapped[datetime] = mapped_column(default=naive_utcnow)

    proposal: Mapped[Proposal] = relationship(back_populates="reviews")
    reviewer: Mapped[User] = relationship(back_populates="reviews")

    def __repr__(self):
        return f"<Review {self.id} proposal={self.proposal_id} score={self.score}>"


class BudgetRequest(BaseModel):
    __tablename__ = "budget_request"
    __table_args__ = (CheckConstraint("requested_amount >= 0", name="requested_amount_non_negative"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    proposal_id: Mapped[int] = mapped_column(ForeignKey("proposal.id"), index=True)
    requested_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    justification: Mapped[str]
    status: Mapped[BudgetStatus] = mapped_column(
        status_type(BudgetStatus, "budget_status"), default=BudgetStatus.PENDING
    )
    requested_by: Mapped[int] = mapped_column(ForeignKey("user.id"))
    approved_by: Mapped[int | None] = mapped_column(ForeignKey("user.id"))
    requested_at: Mapped[datetime] = mapped_column(default=naive_utcnow)
    reviewed_at: Mapped[datetime | None]

    proposal: Mapped[Proposal] = relationship(back_populates="budget_requests")
    requester: Mapped[User] = relationship(back_populates="budget_requests", foreign_keys=[requested_by])
    approver: Mapped[User | None] = relationship(foreign_keys=[approved_by])

    def __repr__(self):
        return f"<BudgetRequest {self.id} {self.status}>"

    def valid_statuses(self) -> list[BudgetStatus]:
        return BUDGET_STATES[self.status]

    def set_status(self, status: str | BudgetStatus):
        status = _coerce_status(BudgetStatus, status, BudgetStateException)
        if status not in self.valid_statuses():
            raise BudgetStateException(f'"{self.status}->{status}" is not a valid transition')

        self.status = status

    @property
    def is_decided(self) -> bool:
        return self.status != BudgetStatus.PENDING
