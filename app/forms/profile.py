from flask_wtf import FlaskForm
from wtforms import StringField, SubmitField
from wtforms.validators import DataRequired, Length, Regexp


class UsernameForm(FlaskForm):
    username = StringField(
        "Username",
        validators=[
            DataRequired(message="Username cannot be empty."),
            Length(3, 64),
            Regexp(r"^[\w.\-]+$", message="Letters, digits, '.', '-' and '_' only."),
        ],
    )
    submit = SubmitField("Save")
