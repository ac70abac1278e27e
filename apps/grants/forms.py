from wtforms import DecimalField, IntegerField, SelectField, StringField, TextAreaField
from wtforms.validators import DataRequired, InputRequired, Length, NumberRange, Optional, ValidationError

from models.grants import SCORE_MAX, SCORE_MIN, Recommendation

from ..common.fields import ParsedDateTimeField
from ..common.forms import Form


class CreateCallForm(Form):
    title = StringField("Title", [DataRequired(), Length(max=200)])
    description = TextAreaField("Description", [DataRequired()])
    deadline = ParsedDateTimeField("Deadline", [InputRequired()])


class SubmitProposalForm(Form):
    title = StringField("Title", [DataRequired(), Length(max=200)])
    abstract = TextAreaField("Abstract", [DataRequired()])
    methodology = TextAreaField("Methodology", [DataRequired()])
    budget_amount = DecimalField("Budget amount", [InputRequired(), NumberRange(min=0)], places=2)


class AssignReviewerForm(Form):
    reviewer_id = IntegerField("Reviewer", [InputRequired()])


class ReviewForm(Form):
    score = IntegerField("Score", [InputRequired(), NumberRange(min=SCORE_MIN, max=SCORE_MAX)])
    recommendation = SelectField(
        "Recommendation",
        [DataRequired()],
        choices=[(r.value, r.value.capitalize()) for r in Recommendation],
    )
    comments = TextAreaField("Comments", [DataRequired()])

    def validate_score(form, field):
        # IntegerField would quietly truncate 50.5 from a JSON body
        if field.raw_data and isinstance(field.raw_data[0], float):
            raise ValidationError("Score must be a whole number")


class DecisionForm(Form):
    decision = SelectField("Decision", [DataRequired()], choices=[("approved", "Approve"), ("rejected", "Reject")])


class BudgetRequestForm(Form):
    # Defaults to the amount asked for in the proposal
    requested_amount = DecimalField("Requested amount", [Optional(), NumberRange(min=0)], places=2)
    justification = TextAreaField("Justification", [DataRequired()])
