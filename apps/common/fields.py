from dateutil.parser import ParserError
from dateutil.parser import parse as parse_date
from email_validator import EmailNotValidError, validate_email
from wtforms import Field, StringField, ValidationError
from wtforms.widgets import EmailInput, TextInput


class EmailField(StringField):
    """HTML5 email field using the email_validator package to perform
    enhanced email validation.

    You don't need to provide additional validators to this field.
    """

    widget = EmailInput()

    def pre_validate(self, form):
        if not self.data:
            raise ValidationError("This field is required.")
        try:
            result = validate_email(self.data, check_deliverability=False)
            # Replace data with normalised version of email
            self.data = result.normalized
        except EmailNotValidError as e:
            raise ValidationError(str(e)) from e


class ParsedDateTimeField(Field):
    """A datetime field which accepts anything python-dateutil can parse,
    e.g. the `2025-03-01T17:00` a datetime-local input sends.

    Timezone-aware values are rejected, as everything is stored as naive UTC.
    """

    widget = TextInput()

    def _value(self):
        if self.raw_data:
            return " ".join(self.raw_data)
        return self.data.isoformat() if self.data else ""

    def process_formdata(self, valuelist):
        if not valuelist or not valuelist[0].strip():
            self.data = None
            return

        try:
            value = parse_date(valuelist[0])
        except (ParserError, OverflowError) as e:
            self.data = None
            raise ValueError("Not a valid date and time") from e

        if value.tzinfo is not None:
            self.data = None
            raise ValueError("Times must not include a timezone")
        self.data = value
