import logging

from logger import ColorizingStreamHandler, transition_logging
from loggingmanager import ContextFormatter, set_user_id
from models.grants import Proposal, ProposalStatus
from models.user import Role, User

from _utils import ctx_for


def make_record(message):
    return logging.LogRecord("grants", logging.INFO, __file__, 1, message, None, None)


def test_context_formatter():
    formatter = ContextFormatter("[%(user)s:%(role)s] %(message)s")

    set_user_id("director@example.com", Role.DIRECTOR)
    try:
        assert formatter.format(make_record("hello")) == "[director@example.com:director] hello"
    finally:
        set_user_id(None)

    assert formatter.format(make_record("hello")) == "[None:None] hello"


def test_colorizing_handler_only_colours_terminals():
    handler = ColorizingStreamHandler()
    handler.stream = None
    assert not handler.is_tty

    record = make_record("careful")
    record.levelname = "WARNING"
    assert handler.colorize("careful", record) == "\x1b[33mcareful\x1b[0m"


def test_transition_logging(caplog):
    director = User("director@example.com", "Test Director", Role.DIRECTOR)
    director.id = 7
    proposal = Proposal(id=3, status=ProposalStatus.APPROVED)

    logger = logging.getLogger("grants.test")
    with caplog.at_level(logging.INFO, logger="grants.test"):
        transition_logging(logger, proposal, ProposalStatus.UNDER_REVIEW, ProposalStatus.APPROVED, ctx_for(director))

    assert caplog.messages == ["Proposal 3: under_review -> approved by 7 (director)"]
