from flask import Blueprint, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    PlatformCollector,
    generate_latest,
)
from prometheus_client.core import Counter, GaugeMetricFamily, Histogram
from prometheus_client.multiprocess import MultiProcessCollector
from sqlalchemy import func, select

from main import db
from models import count_groups
from models.grants import BudgetRequest, BudgetStatus, CallForPapers, Proposal, Review
from models.user import User

metrics = Blueprint("metric", __name__)

request_duration = Histogram("grants_request_duration_seconds", "Request duration", ["endpoint", "method"])
request_total = Counter("grants_request_total", "Total request count", ["endpoint", "method", "http_status"])


def gauge_groups(gauge, query, *entities):
    for count, *key in count_groups(query, *entities):
        gauge.add_metric([str(k) for k in key], count)


class ExternalMetrics:
    def __init__(self, registry=None):
        if registry is not None:
            registry.register(self)

    def collect(self):
        # Strictly, we should include all possible combinations, with 0

        grants_users = GaugeMetricFamily("grants_users", "Registered profiles", labels=["role"])
        grants_calls = GaugeMetricFamily("grants_calls", "Calls for papers", labels=["status"])
        grants_proposals = GaugeMetricFamily("grants_proposals", "Proposals", labels=["status"])
        grants_reviews = GaugeMetricFamily("grants_reviews", "Reviews submitted", labels=["recommendation"])
        grants_budget_requests = GaugeMetricFamily(
            "grants_budget_requests", "Budget requests", labels=["status"]
        )
        grants_budget_approved = GaugeMetricFamily("grants_budget_approved", "Total budget approved")

        gauge_groups(grants_users, select(User), User.role)
        gauge_groups(grants_calls, select(CallForPapers), CallForPapers.status)
        gauge_groups(grants_proposals, select(Proposal), Proposal.status)
        gauge_groups(grants_reviews, select(Review), Review.recommendation)
        gauge_groups(grants_budget_requests, select(BudgetRequest), BudgetRequest.status)

        approved_total = db.session.scalar(
            select(func.coalesce(func.sum(BudgetRequest.requested_amount), 0)).where(
                BudgetRequest.status == BudgetStatus.APPROVED
            )
        )
        grants_budget_approved.add_metric([], float(approved_total))

        return [
            grants_users,
            grants_calls,
            grants_proposals,
            grants_reviews,
            grants_budget_requests,
            grants_budget_approved,
        ]


@metrics.route("/metrics")
def collect_metrics():
    registry = CollectorRegistry()
    MultiProcessCollector(registry)
    PlatformCollector(registry)
    ExternalMetrics(registry)

    data = generate_latest(registry)

    return Response(data, mimetype=CONTENT_TYPE_LATEST)
