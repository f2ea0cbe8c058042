from .user import (
    SignupSchema, SigninSchema, UpdateAccountSchema, UserSchema,
    StatusSchema, CoachAssignSchema, PinSchema,
)
from .log import (
    LogSchema, LogItemSchema, PlanAssignSchema, CompletePlanSchema, ShareSchema, FeedbackSchema,
)
from .content import ExerciseSchema, BattleSchema, CommentSchema, BattleRecordSchema, ThresholdSchema
