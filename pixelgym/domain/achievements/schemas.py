from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from pixelgym.domain import new_id


class CriteriaType(str, Enum):
    log_count = "log_count"
    max_weight = "max_weight"
    plan_count = "plan_count"
    total_time = "total_time"


class Achievement(BaseModel):
    """A badge definition, either built in (creatorId "admin") or authored by a coach."""
    model_config = ConfigDict(use_enum_values=True, extra="ignore")

    id: str = Field(default_factory=new_id)
    creatorId: str = "admin"
    targetAudience: str = "all"
    title: str = Field(..., min_length=1)
    description: str = ""
    icon: str = "🏅"
    criteriaType: CriteriaType
    criteriaValue: Union[int, float] = Field(..., ge=0)
    criteriaExercise: Optional[str] = None


class Progress(BaseModel):
    current: Union[int, float]
    threshold: Union[int, float]
    unlocked: bool
