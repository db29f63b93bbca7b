from familyhub.models.account import Account
from familyhub.models.auth_session import AuthSession
from familyhub.models.calendar_event import AttendeeStatus, CalendarEvent, EventAttendee
from familyhub.models.family import Family
from familyhub.models.member import Member, MemberRole
from familyhub.models.message import Message, MessageType, PingType
from familyhub.models.place import Place
from familyhub.models.task import Task, TaskList, TaskPriority, TaskStatus

__all__ = [
    "Account",
    "AttendeeStatus",
    "AuthSession",
    "CalendarEvent",
    "EventAttendee",
    "Family",
    "Member",
    "MemberRole",
    "Message",
    "MessageType",
    "PingType",
    "Place",
    "Task",
    "TaskList",
    "TaskPriority",
    "TaskStatus",
]
