from enum import Enum
import logging
import os


class AnsiColors(Enum):
    RESET = 0
    BOLD = 1
    RED = 31
    GREEN = 32
    YELLOW = 33
    BLUE = 34
    CYAN = 36

    CSI = "\x1b["

    @classmethod
    def sgr(cls, *codes):
        return AnsiColors.CSI.value + ";".join([str(AnsiColors[c].value) for c in codes]) + "m"


class ColorizingStreamHandler(logging.StreamHandler):
    """Console handler which colours each line of a record by level.

    Colour is only applied when the stream is a terminal, or when
    COLORIZE_LOGS=always is set (for docker logs and the like).
    """

    DEFAULT_COLORS = {
        "DEBUG": "BLUE",
        "WARNING": "YELLOW",
        "ERROR": "RED",
        "CRITICAL": ["RED", "BOLD"],
    }

    def __init__(self, stream=None, colors=None):
        super().__init__(stream)

        if colors is None:
            colors = {}
        colors = dict(**self.DEFAULT_COLORS, **colors)
        self.colors = {}
        for k, v in colors.items():
            if not isinstance(v, (list, tuple)):
                v = [v]
            self.colors[k] = AnsiColors.sgr(*v)

        self.should_colorize = self.is_tty or os.getenv("COLORIZE_LOGS") == "always"

    @property
    def is_tty(self):
        isatty = getattr(self.stream, "isatty", None)
        return isatty and isatty()

    def colorize(self, message, record):
        color = self.colors.get(record.levelname)
        if color:
            lines = message.splitlines()
            message = "\n".join(color + line + AnsiColors.sgr("RESET") for line in lines)
        return message

    def format(self, record):
        message = logging.StreamHandler.format(self, record)
        if self.should_colorize:
            message = self.colorize(message, record)
        return message


def transition_logging(logger, record, old, new, ctx):
    """Log a status change on a grant record, with who made it"""
    logger.info(
        "%s %s: %s -> %s by %s (%s)",
        record.__class__.__name__,
        record.id,
        old,
        new,
        ctx.user_id,
        ctx.role,
    )
