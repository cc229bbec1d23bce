"""Create the trigger action that routes problems to Telegram."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from src.zabbix.transport import ZabbixTransport
from src.zabbix.types import (
    DEFAULT_MESSAGE,
    DEFAULT_SUBJECT,
    Action,
    ActionCreate,
    ActionCreateResult,
    OpMessage,
    OpMessageUser,
    Operation,
)

logger = structlog.stdlib.get_logger()


@dataclass(frozen=True)
class ActionOutcome:
    actionid: str
    created: bool


def build_action(
    name: str,
    mediatypeid: str,
    userid: str,
    subject: str = DEFAULT_SUBJECT,
    message: str = DEFAULT_MESSAGE,
) -> ActionCreate:
    """Trigger action with one send-message operation to one user."""
    operation = Operation(
        opmessage=OpMessage(mediatypeid=mediatypeid, subject=subject, message=message),
        opmessage_usr=[OpMessageUser(userid=userid)],
    )
    return ActionCreate(name=name, operations=[operation])


async def reconcile_action(
    transport: ZabbixTransport,
    name: str,
    mediatypeid: str,
    userid: str,
) -> ActionOutcome:
    """Create the action named *name* unless one already exists.

    Existing actions are matched by name only; their operations are not
    compared or updated.
    """
    actions = await transport.call(
        "action.get",
        {"output": ["actionid", "name"], "filter": {"name": name}},
        list[Action],
    )
    if actions:
        logger.info("action_exists", actionid=actions[0].actionid, name=name)
        return ActionOutcome(actions[0].actionid, created=False)

    payload = build_action(name, mediatypeid, userid)
    result = await transport.call("action.create", payload, ActionCreateResult)
    actionid = result.actionids[0]
    logger.info("action_created", actionid=actionid, name=name)
    return ActionOutcome(actionid, created=True)
