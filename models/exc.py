class AuthError(Exception):
    """Invalid credentials, or a registration which clashes with an existing account"""


class PermissionDenied(Exception):
    """The signed-in profile's role may not perform this action"""


class SubmissionInvalid(ValueError):
    """Input rejected before anything is written"""


class StoreError(Exception):
    """A read or write against the database failed"""


class RecordNotFound(StoreError, LookupError):
    def __init__(self, model, id):
        self.model = model
        self.id = id
        super().__init__(f"{model.__name__} {id} not found")
