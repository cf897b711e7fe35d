from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField, SelectMultipleField, SubmitField
from wtforms.validators import DataRequired, Length
from wtforms.widgets import ListWidget, CheckboxInput


class MultiCheckboxField(SelectMultipleField):
    """Topic picker rendered as a row of checkboxes."""
    widget = ListWidget(prefix_label=False)
    option_widget = CheckboxInput()


class PostForm(FlaskForm):
    title = StringField(
        "Title",
        validators=[DataRequired(message="Give your debate a title."), Length(1, 200)],
        render_kw={"placeholder": "Debate title…", "maxlength": "200"},
    )
    content = TextAreaField(
        "Argument",
        validators=[DataRequired(message="Present your argument."), Length(1, 5000)],
        render_kw={"rows": 3, "placeholder": "Present your argument…"},
    )
    topics = MultiCheckboxField(
        "Topics (at least one)",
        coerce=int,
        validators=[DataRequired(message="Select at least one topic.")],
    )
    submit = SubmitField("Start Debate")

    def set_topic_choices(self, topics) -> None:
        self.topics.choices = [(t.id, t.name) for t in topics]


class CommentForm(FlaskForm):
    content = StringField(
        "Comment",
        validators=[DataRequired(message="Please enter a comment."), Length(1, 1000)],
        render_kw={"placeholder": "Add a comment…", "maxlength": "1000"},
    )
    submit = SubmitField("Comment")
