from flask_wtf import FlaskForm
from wtforms import IntegerField, SelectField, StringField
from wtforms.validators import DataRequired, NumberRange, Optional, Regexp

from portal.models import StudyMode, SubmissionStatus

ACADEMIC_YEAR_REGEX = r'^\d{4}\s*[/-]\s*\d{4}$'
STUDY_MODE_CHOICES = [(mode.value, mode.value) for mode in StudyMode]


class PeriodForm(FlaskForm):
    academic_year = StringField('Academic Year', validators=[
        DataRequired(), Regexp(ACADEMIC_YEAR_REGEX, message='Use YYYY/YYYY or YYYY-YYYY')])
    semester = IntegerField('Semester', validators=[DataRequired(), NumberRange(min=1, max=3)])


class FeeStructureForm(FlaskForm):
    level = StringField('Level', validators=[DataRequired()])
    study_mode = StringField('Study Mode', validators=[DataRequired()])


class ProgramCoursesForm(FlaskForm):
    level = StringField('Level', validators=[DataRequired()])
    semester = StringField('Semester', validators=[DataRequired()])
    year = StringField('Academic Year', validators=[
        Optional(), Regexp(ACADEMIC_YEAR_REGEX, message='Use YYYY/YYYY or YYYY-YYYY')])
    study_mode = SelectField('Study Mode', choices=[('', 'Any')] + STUDY_MODE_CHOICES,
                             validators=[Optional()], default='')


class SubmissionStatusForm(FlaskForm):
    status = SelectField('Status', choices=[
        (SubmissionStatus.APPROVED.value, 'Approve'),
        (SubmissionStatus.PUBLISHED.value, 'Publish'),
    ], validators=[DataRequired()])
    actor = StringField('Actor', validators=[Optional()])
