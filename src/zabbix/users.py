"""Attach the Telegram contact address to the target Zabbix user."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from src.zabbix.exceptions import ZbxDomainError
from src.zabbix.transport import ZabbixTransport
from src.zabbix.types import LoginSchema, User, UserMedia

logger = structlog.stdlib.get_logger()


@dataclass(frozen=True)
class UserOutcome:
    userid: str
    updated: bool


def alias_field(schema: LoginSchema | None) -> str:
    """User property holding the login name for the negotiated API version."""
    return "username" if schema is LoginSchema.NEW else "alias"


def merge_media(existing: list[UserMedia], desired: UserMedia) -> list[UserMedia] | None:
    """Return *existing* plus *desired*, or None if an equal address exists."""
    if any(m.same_address(desired) for m in existing):
        return None
    return [*existing, desired]


async def find_user(transport: ZabbixTransport, alias: str) -> User:
    field = alias_field(transport.session.schema)
    users = await transport.call(
        "user.get",
        {
            "output": ["userid", field, "name"],
            "filter": {field: alias},
            "selectMedias": "extend",
        },
        list[User],
    )
    if not users:
        raise ZbxDomainError(f"User with alias '{alias}' not found")
    return users[0]


async def reconcile_user_media(
    transport: ZabbixTransport,
    alias: str,
    mediatypeid: str,
    sendto: str,
) -> UserOutcome:
    """Ensure the user with *alias* has a (*mediatypeid*, *sendto*) media.

    ``user.update`` replaces the whole media list, so the update carries every
    existing entry in its original order followed by the new one.
    """
    user = await find_user(transport, alias)
    desired = UserMedia(mediatypeid=mediatypeid, sendto=sendto)

    medias = merge_media(user.medias, desired)
    if medias is None:
        logger.info("user_media_present", userid=user.userid, chat_id=sendto)
        return UserOutcome(user.userid, updated=False)

    await transport.call(
        "user.update",
        {
            "userid": user.userid,
            "medias": [m.model_dump() for m in medias],
        },
    )
    logger.info("user_media_attached", userid=user.userid, chat_id=sendto)
    return UserOutcome(user.userid, updated=True)
