"""Notification kinds emitted by the core."""

from enum import Enum


class NotificationKind(Enum):
    TICKET_ASSIGNED = "ticket_assigned"
    COMMENT_ADDED = "comment_added"
    COMMENT_REPLY = "comment_reply"
    MEMBER_INVITED = "member_invited"
