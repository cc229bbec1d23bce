"""Typed shapes for Zabbix API requests and results.

Zabbix returns numeric identifiers and flags as strings, and optional
properties are omitted rather than nulled, so result models coerce numbers to
strings and default every non-identifying field.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# UserMedia defaults: enabled, every severity, always active.
MEDIA_ACTIVE_ENABLED = "0"
MEDIA_SEVERITY_ALL = "63"
MEDIA_PERIOD_ALWAYS = "1-7,00:00-24:00"

# Parameter names that carry the bot token on the Telegram media type.
TOKEN_PARAMETER_NAMES = frozenset({"token", "bottoken"})

DEFAULT_SUBJECT = "{HOST.NAME} | Problem: {EVENT.NAME}"
DEFAULT_MESSAGE = (
    "Problem started at {EVENT.TIME} on {EVENT.DATE}\n"
    "Problem name: {EVENT.NAME}\n"
    "Host: {HOST.NAME}\n"
    "Severity: {TRIGGER.SEVERITY}\n"
    "Original problem ID: #{EVENT.ID}\n"
    "{TRIGGER.URL}"
)


class LoginSchema(StrEnum):
    """Parameter schema accepted by ``user.login``."""

    NEW = "new"  # {"username", "password"}
    OLD = "old"  # {"user", "password"}


class EventSource(IntEnum):
    TRIGGERS = 0


class ActionStatus(IntEnum):
    ENABLED = 0
    DISABLED = 1


class OperationType(IntEnum):
    SEND_MESSAGE = 0


class _ZbxModel(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)


# ── Results ─────────────────────────────────────────────────────


class MediaTypeParameter(_ZbxModel):
    """One ``{name, value}`` entry of a webhook media type.

    Unknown keys are kept so a full-list update writes them back unchanged.
    """

    model_config = ConfigDict(coerce_numbers_to_str=True, extra="allow")

    name: str
    value: str | None = None

    @property
    def is_token(self) -> bool:
        return self.name.lower() in TOKEN_PARAMETER_NAMES


class MediaType(_ZbxModel):
    mediatypeid: str
    name: str = ""
    status: str | None = None
    parameters: list[MediaTypeParameter] | None = None


class UserMedia(_ZbxModel):
    """A contact address attached to a user.

    ``sendto`` is a list for e-mail media and a string for everything else.
    """

    mediatypeid: str
    sendto: str | list[str]
    active: str = MEDIA_ACTIVE_ENABLED
    severity: str = MEDIA_SEVERITY_ALL
    period: str = MEDIA_PERIOD_ALWAYS

    def same_address(self, other: UserMedia) -> bool:
        return self.mediatypeid == other.mediatypeid and self.sendto == other.sendto


class User(_ZbxModel):
    userid: str
    alias: str | None = None
    username: str | None = None
    name: str | None = None
    medias: list[UserMedia] = Field(default_factory=list)


class Action(_ZbxModel):
    actionid: str
    name: str = ""


class ActionCreateResult(_ZbxModel):
    actionids: list[str] = Field(min_length=1)


# ── Requests ────────────────────────────────────────────────────


class OpMessage(BaseModel):
    default_msg: int = 0
    mediatypeid: str
    subject: str
    message: str


class OpMessageUser(BaseModel):
    userid: str


class Operation(BaseModel):
    operationtype: int = OperationType.SEND_MESSAGE
    opmessage: OpMessage
    opmessage_usr: list[OpMessageUser]


class ActionCreate(BaseModel):
    name: str
    eventsource: int = EventSource.TRIGGERS
    status: int = ActionStatus.ENABLED
    operations: list[Operation]


def dump_parameters(params: list[MediaTypeParameter]) -> list[dict[str, Any]]:
    """Serialise media type parameters for ``mediatype.update``."""
    return [p.model_dump(exclude_unset=True) for p in params]
