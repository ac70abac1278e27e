import random
from datetime import timedelta

from faker import Faker

from apps.common.session import SessionContext
from apps.grants import lifecycle
from main import db
from models import naive_utcnow
from models.grants import ProposalStatus, Recommendation
from models.user import Role, User

DEV_PASSWORD = "password"

DEPARTMENTS = ["Physics", "Chemistry", "Biology", "Computer Science", "History", "Economics"]


def random_state(states):
    cumulative = []
    p = 0
    for state, prob in states.items():
        cumulative.append((state, p + prob))
        p += prob
    assert round(p, 3) == 1

    r = random.random()
    for state, prob in cumulative:
        if r <= prob:
            return state
    assert False


def randombool(probability):
    return random.random() < probability


class FakeDataGenerator(object):
    """Drive fake proposals through the real lifecycle, so every record
    ends up in a state the app could have produced itself."""

    def __init__(self):
        self.fake = Faker("en_GB")

    def get_or_create_user(self, email, name, role, department=None):
        user = User.get_by_email(email)
        if user is None:
            user = User(email, name, role, department=department)
            user.set_password(DEV_PASSWORD)
            db.session.add(user)
            db.session.commit()
        return SessionContext(user)

    def run(self):
        director = self.get_or_create_user("director@test.invalid", "Test Director", Role.DIRECTOR)
        coordinator = self.get_or_create_user("coordinator@test.invalid", "Test Coordinator", Role.COORDINATOR)
        vice_president = self.get_or_create_user("vp@test.invalid", "Test Vice President", Role.VICE_PRESIDENT)

        reviewers = [
            self.get_or_create_user(f"reviewer{i}@test.invalid", f"Reviewer {i}", Role.REVIEWER)
            for i in range(5)
        ]
        researchers = [
            self.get_or_create_user(
                f"researcher{i}@test.invalid",
                self.fake.name(),
                Role.RESEARCHER,
                department=random.choice(DEPARTMENTS),
            )
            for i in range(10)
        ]

        calls = [
            lifecycle.create_call(
                director,
                title=self.fake.sentence(nb_words=5).rstrip("."),
                description=self.fake.text(max_nb_chars=500),
                deadline=naive_utcnow() + timedelta(days=random.randint(14, 90)),
            )
            for _ in range(3)
        ]

        for researcher in researchers:
            for _ in range(random.randint(0, 3)):
                proposal = lifecycle.submit_proposal(
                    researcher,
                    random.choice(calls).id,
                    title=self.fake.sentence(nb_words=6, variable_nb_words=True),
                    abstract=self.fake.text(max_nb_chars=500),
                    methodology=self.fake.text(max_nb_chars=800),
                    budget_amount=random.randint(5, 250) * 1000,
                )
                self.progress(proposal, director, coordinator, vice_president, reviewers)

    def progress(self, proposal, director, coordinator, vice_president, reviewers):
        target = random_state(
            {
                "submitted": 0.2,
                "under_review": 0.3,
                "rejected": 0.1,
                "approved": 0.1,
                "budget_requested": 0.15,
                "budget_approved": 0.15,
            }
        )
        if target == "submitted":
            return

        assigner = random.choice([director, coordinator])
        panel = random.sample(reviewers, random.randint(1, 3))
        for reviewer in panel:
            lifecycle.assign_reviewer(assigner, proposal.id, reviewer.user_id)
            if randombool(0.7):
                lifecycle.submit_review(
                    reviewer,
                    proposal.id,
                    score=random.randint(0, 100),
                    recommendation=random.choice(list(Recommendation)),
                    comments=self.fake.text(max_nb_chars=300),
                )

        if target == "under_review":
            return

        if target == "rejected":
            lifecycle.decide_proposal(director, proposal.id, ProposalStatus.REJECTED)
            return

        lifecycle.decide_proposal(director, proposal.id, ProposalStatus.APPROVED)
        if target == "approved":
            return

        budget_request = lifecycle.request_budget(
            director,
            proposal.id,
            amount=proposal.budget_amount,
            justification=self.fake.text(max_nb_chars=300),
        )
        if target == "budget_approved":
            lifecycle.decide_budget(vice_president, budget_request.id, "approved")
        elif randombool(0.3):
            lifecycle.decide_budget(vice_president, budget_request.id, "rejected")
