from enum import Enum


class UserRole(str, Enum):
    student = "student"
    coach = "coach"


class UserStatus(str, Enum):
    pending = "pending"
    active = "active"
    disabled = "disabled"
