from collections import OrderedDict
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import inspect
from sqlalchemy.sql.functions import func

from main import db

# If we're type checking, we want models to inherit from the BaseModel (trivial subclass
# of DeclarativeBase) as mypy can't handle using the sqlalchemy-flask generated db.Model
if TYPE_CHECKING:
    from main import BaseModel
else:
    BaseModel = db.Model


def naive_utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def to_dict(obj, exclude=()):
    """Serialise the column attributes of a model for JSON output"""
    data = OrderedDict()
    for attr in inspect(obj).mapper.column_attrs:
        if attr.key in exclude:
            continue
        value = getattr(obj, attr.key)
        if isinstance(value, datetime):
            value = value.isoformat()
        elif isinstance(value, Decimal):
            value = str(value)
        elif isinstance(value, Enum):
            value = value.value
        data[attr.key] = value
    return data


def count_groups(selectable, *entities):
    return db.session.execute(
        selectable.with_only_columns(func.count().label("count"), *entities)
        .group_by(*entities)
        .order_by(*entities)
    )


from .grants import *  # noqa: F403
from .user import *  # noqa: F403

db.configure_mappers()
