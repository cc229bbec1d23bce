"""Telegram media type lookup and bot token reconciliation."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from src.zabbix.exceptions import ZbxDomainError
from src.zabbix.transport import ZabbixTransport
from src.zabbix.types import MediaType, MediaTypeParameter, dump_parameters

logger = structlog.stdlib.get_logger()


@dataclass(frozen=True)
class MediaTypeOutcome:
    mediatypeid: str
    updated: bool


def apply_token(
    params: list[MediaTypeParameter],
    token: str,
) -> tuple[list[MediaTypeParameter], bool]:
    """Return a copy of *params* with every token entry set to *token*.

    Order and all other entries are preserved. The flag is True when at
    least one value changed.
    """
    changed = False
    result: list[MediaTypeParameter] = []
    for p in params:
        if p.is_token and p.value != token:
            p = p.model_copy(update={"value": token})
            changed = True
        result.append(p)
    return result, changed


async def find_media_type(transport: ZabbixTransport, name: str) -> MediaType:
    media_types = await transport.call(
        "mediatype.get",
        {
            "output": ["mediatypeid", "name", "parameters", "status"],
            "filter": {"name": name},
        },
        list[MediaType],
    )
    if not media_types:
        raise ZbxDomainError(f"Media type '{name}' not found in Zabbix")
    return media_types[0]


async def reconcile_media_type(
    transport: ZabbixTransport,
    name: str,
    token: str | None,
) -> MediaTypeOutcome:
    """Find the media type by name and push *token* into its parameters.

    A ``None`` token skips the update. Only a changed value triggers
    ``mediatype.update``, which always carries the complete parameter list.
    """
    media_type = await find_media_type(transport, name)
    mediatypeid = media_type.mediatypeid
    logger.info("media_type_found", mediatypeid=mediatypeid, name=name)

    if token is None:
        logger.warning("media_type_token_missing", hint="set TELEGRAM_BOT_TOKEN or ZBX_BOT_TOKEN")
        return MediaTypeOutcome(mediatypeid, updated=False)

    if media_type.parameters is None:
        logger.warning("media_type_has_no_parameters", mediatypeid=mediatypeid)
        return MediaTypeOutcome(mediatypeid, updated=False)

    params, changed = apply_token(media_type.parameters, token)
    if not changed:
        logger.info("media_type_token_unchanged", mediatypeid=mediatypeid)
        return MediaTypeOutcome(mediatypeid, updated=False)

    await transport.call(
        "mediatype.update",
        {"mediatypeid": mediatypeid, "parameters": dump_parameters(params)},
    )
    logger.info("media_type_token_updated", mediatypeid=mediatypeid)
    return MediaTypeOutcome(mediatypeid, updated=True)
