from marshmallow import INCLUDE, fields, validate, pre_load
from pixelgym.extensions import ma
from pixelgym.domain.achievements.services import MAX_PINNED
from pixelgym.domain.users.schemas import UserRole, UserStatus

ROLES = [r.value for r in UserRole]
STATUSES = [s.value for s in UserStatus]


class SignupSchema(ma.Schema):
    email = fields.Email(load_default=None)
    password = fields.String(required=True, validate=validate.Length(min=6))
    name = fields.String(required=True, validate=validate.Length(min=1, max=50))
    role = fields.String(load_default=UserRole.student.value, validate=validate.OneOf(ROLES))

    @pre_load
    def strip_name(self, data, **kwargs):
        if isinstance(data.get("name"), str):
            data = dict(data, name=data["name"].strip())
        return data


class SigninSchema(ma.Schema):
    name = fields.String(load_default=None)
    email = fields.Email(load_default=None)
    password = fields.String(required=True, validate=validate.Length(min=1))


class UpdateAccountSchema(ma.Schema):
    email = fields.Email(load_default=None)
    password = fields.String(load_default=None, validate=validate.Length(min=6))

    @pre_load
    def drop_blank(self, data, **kwargs):
        return {k: v for k, v in data.items() if v not in ("", None)}


class UserSchema(ma.Schema):
    """Profile record. Unknown keys are kept: the store holds whole objects."""
    class Meta:
        unknown = INCLUDE

    id = fields.String(required=True, validate=validate.Length(min=1))
    name = fields.String(validate=validate.Length(min=1))
    role = fields.String(validate=validate.OneOf(ROLES))
    status = fields.String(validate=validate.OneOf(STATUSES))
    coachId = fields.String(allow_none=True)
    customBadges = fields.List(fields.Dict())
    selectedBadgeIds = fields.List(fields.String(), validate=validate.Length(max=MAX_PINNED))
    definedAchievements = fields.List(fields.Dict())


class StatusSchema(ma.Schema):
    status = fields.String(required=True, validate=validate.OneOf(STATUSES))


class CoachAssignSchema(ma.Schema):
    coachId = fields.String(required=True, allow_none=True)


class PinSchema(ma.Schema):
    achievementId = fields.String(required=True, validate=validate.Length(min=1))
