from flask_wtf import FlaskForm


class Form(FlaskForm):
    """
    Re-override these back to their wtforms defaults

    Forms are submitted by API clients as form data or JSON bodies, so
    there's no CSRF token to check.
    """

    class Meta(FlaskForm.Meta):
        csrf = False
        csrf_class = None
        csrf_context = None
