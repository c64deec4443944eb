"""String enums stored in status/type columns."""

from __future__ import annotations

import enum


class UserRole(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"


class PostStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class VoteType(str, enum.Enum):
    UP = "UP"
    DOWN = "DOWN"


class ReportStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ReportReason(str, enum.Enum):
    SPAM = "spam"
    INAPPROPRIATE = "inappropriate"
    VIOLENCE = "violence"
    HARASSMENT = "harassment"
    FALSE_INFO = "false_info"
    OTHER = "other"


class ReviewAction(str, enum.Enum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"


class ModerationAction(str, enum.Enum):
    ADMIN_REVIEW = "ADMIN_REVIEW"
    OVERRIDE = "OVERRIDE"
    AUTO_REJECT = "AUTO_REJECT"
    AUTO_APPROVE = "AUTO_APPROVE"


class PostCategory(str, enum.Enum):
    THEFT = "THEFT"
    ROBBERY = "ROBBERY"
    ASSAULT = "ASSAULT"
    HARASSMENT = "HARASSMENT"
    VANDALISM = "VANDALISM"
    FRAUD = "FRAUD"
    OTHERS = "OTHERS"


class NotificationType(str, enum.Enum):
    POST_APPROVED = "POST_APPROVED"
    POST_REJECTED = "POST_REJECTED"
    POST_RETURNED_TO_REVIEW = "POST_RETURNED_TO_REVIEW"
