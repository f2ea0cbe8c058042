from marshmallow import INCLUDE, fields, validate
from pixelgym.extensions import ma


class LogItemSchema(ma.Schema):
    class Meta:
        unknown = INCLUDE

    id = fields.String()
    exercise = fields.String(required=True, validate=validate.Length(min=1))
    # Numbers are coerced leniently when the record is built
    weight = fields.Raw(load_default=0)
    reps = fields.Raw(load_default=0)
    sets = fields.Raw(load_default=0)
    muscle = fields.String(load_default="")


class LogSchema(ma.Schema):
    class Meta:
        unknown = INCLUDE

    id = fields.String()
    studentId = fields.String(required=True, validate=validate.Length(min=1))
    date = fields.String()
    items = fields.List(fields.Nested(LogItemSchema), load_default=list)
    notes = fields.String(load_default="")
    score = fields.Float(allow_none=True)
    coachComment = fields.String(allow_none=True)
    isHidden = fields.Boolean()
    isPlan = fields.Boolean()
    isPlanCompleted = fields.Boolean()
    isShared = fields.Boolean()
    duration = fields.Float(allow_none=True)


class PlanAssignSchema(ma.Schema):
    studentIds = fields.List(fields.String(), required=True, validate=validate.Length(min=1))
    items = fields.List(fields.Nested(LogItemSchema), required=True, validate=validate.Length(min=1))
    notes = fields.String(load_default="")
    date = fields.String(load_default=None)


class CompletePlanSchema(ma.Schema):
    items = fields.List(fields.Nested(LogItemSchema), required=True, validate=validate.Length(min=1))
    notes = fields.String(load_default="")
    date = fields.String(load_default=None)
    duration = fields.Float(load_default=None, validate=validate.Range(min=0))


class ShareSchema(ma.Schema):
    studentIds = fields.List(fields.String(), load_default=None)


class FeedbackSchema(ma.Schema):
    score = fields.Float(load_default=None, allow_none=True)
    coachComment = fields.String(load_default="")
