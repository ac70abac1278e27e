from __future__ import annotations

import enum
import typing
from datetime import datetime

from flask_login import AnonymousUserMixin, UserMixin
from sqlalchemy import Index, func, select
from sqlalchemy.orm import Mapped, mapped_column, relationship
from werkzeug.security import check_password_hash, generate_password_hash

from main import db

from . import BaseModel, naive_utcnow

if typing.TYPE_CHECKING:
    from .grants import BudgetRequest, CallForPapers, Proposal, ProposalReviewer, Review

__all__ = [
    "AnonymousUser",
    "Role",
    "User",
]


class Role(enum.StrEnum):
    RESEARCHER = "researcher"
    REVIEWER = "reviewer"
    COORDINATOR = "coordinator"
    DIRECTOR = "director"
    VICE_PRESIDENT = "vice_president"


class User(BaseModel, UserMixin):
    """A profile issued on registration. The role is fixed at creation."""

    __tablename__ = "user"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(unique=True, index=True)
    full_name: Mapped[str] = mapped_column(index=True)
    role: Mapped[Role] = mapped_column(
        db.Enum(
            Role,
            name="user_role",
            native_enum=False,
            create_constraint=True,
            values_callable=lambda e: [m.value for m in e],
        )
    )
    department: Mapped[str | None]
    password_hash: Mapped[str | None]
    created_at: Mapped[datetime] = mapped_column(default=naive_utcnow)

    proposals: Mapped[list[Proposal]] = relationship(back_populates="researcher", lazy="dynamic")
    calls_created: Mapped[list[CallForPapers]] = relationship(back_populates="creator", lazy="dynamic")
    assignments: Mapped[list[ProposalReviewer]] = relationship(
        primaryjoin="ProposalReviewer.reviewer_id == User.id",
        back_populates="reviewer",
        lazy="dynamic",
    )
    reviews: Mapped[list[Review]] = relationship(back_populates="reviewer", lazy="dynamic")
    budget_requests: Mapped[list[BudgetRequest]] = relationship(
        primaryjoin="BudgetRequest.requested_by == User.id",
        back_populates="requester",
        lazy="dynamic",
    )

    def __init__(self, email: str, full_name: str, role: Role | str, department: str | None = None):
        self.email = email
        self.full_name = full_name
        self.role = Role(role)
        self.department = department

    def __repr__(self):
        return f"<User {self.id} {self.email} ({self.role})>"

    def set_password(self, password: str):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def has_role(self, *roles: Role | str) -> bool:
        return self.role in roles

    @classmethod
    def get_by_email(cls, email: str) -> User | None:
        return db.session.scalars(select(cls).where(func.lower(cls.email) == email.lower())).one_or_none()

    @classmethod
    def reviewers(cls) -> list[User]:
        return list(db.session.scalars(select(cls).where(cls.role == Role.REVIEWER).order_by(cls.full_name)))


Index("ix_user_email_lower", func.lower(User.email), unique=True)


class AnonymousUser(AnonymousUserMixin):
    role = None

    def has_role(self, *roles):
        return False
