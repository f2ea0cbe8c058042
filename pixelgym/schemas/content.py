from marshmallow import EXCLUDE, INCLUDE, fields, validate
from pixelgym.extensions import ma


class ExerciseSchema(ma.Schema):
    class Meta:
        unknown = INCLUDE

    id = fields.String()
    name = fields.String(required=True, validate=validate.Length(min=1))
    muscle = fields.String(required=True, validate=validate.Length(min=1))
    guide = fields.String(load_default="")
    imageUrl = fields.String(load_default="")
    level = fields.Integer(allow_none=True, validate=validate.Range(min=1, max=5))
    tools = fields.Raw(allow_none=True)


class BattleSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    title = fields.String(required=True, validate=validate.Length(min=1))
    # A list of lines, or one newline-separated string from a textarea
    routine = fields.Raw(required=True)
    targetStudentId = fields.String(load_default=None, allow_none=True)


class CommentSchema(ma.Schema):
    # author comes from the session, not the body
    class Meta:
        unknown = EXCLUDE

    content = fields.String(required=True, validate=validate.Length(min=1))


class BattleRecordSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    content = fields.String(required=True, validate=validate.Length(min=1))


class ThresholdSchema(ma.Schema):
    criteriaValue = fields.Float(required=True, validate=validate.Range(min=0))
