"""One-shot Zabbix setup: login, media type token, user media, action."""

from __future__ import annotations

import httpx
import structlog
from pydantic import BaseModel

from src.core.config import Settings, TelegramConfig, ZabbixConfig
from src.zabbix.actions import reconcile_action
from src.zabbix.auth import login
from src.zabbix.exceptions import ZbxConfigError
from src.zabbix.media import reconcile_media_type
from src.zabbix.transport import ZabbixTransport
from src.zabbix.users import reconcile_user_media

logger = structlog.stdlib.get_logger()


class SetupResult(BaseModel):
    """Identifiers touched by a setup run and which steps wrote changes."""

    mediatypeid: str
    userid: str
    actionid: str
    media_type_updated: bool = False
    user_media_attached: bool = False
    action_created: bool = False

    @property
    def changed(self) -> bool:
        return self.media_type_updated or self.user_media_attached or self.action_created


def validate_config(config: ZabbixConfig) -> None:
    """Raise ZbxConfigError naming every missing required field."""
    missing = []
    if not config.api_url:
        missing.append("ZBX_API_URL")
    if not config.password.get_secret_value():
        missing.append("ZBX_PASSWORD")
    if not config.chat_id:
        missing.append("ZBX_CHAT_ID")
    if missing:
        raise ZbxConfigError(f"Missing required setting(s): {', '.join(missing)}")


async def run_setup(
    config: ZabbixConfig,
    telegram: TelegramConfig,
    http: httpx.AsyncClient | None = None,
) -> SetupResult:
    """Bring Zabbix to the desired state, writing only what differs.

    Steps run strictly in order and the first failure propagates; nothing
    already written is rolled back.
    """
    validate_config(config)
    bot_token = telegram.bot_token.get_secret_value() or None

    async with ZabbixTransport(config.api_url, http=http) as zbx:
        await login(zbx, config.user, config.password.get_secret_value())

        media = await reconcile_media_type(zbx, config.media_type_name, bot_token)
        user = await reconcile_user_media(
            zbx, config.user_alias, media.mediatypeid, config.chat_id
        )
        action = await reconcile_action(
            zbx, config.action_name, media.mediatypeid, user.userid
        )

    result = SetupResult(
        mediatypeid=media.mediatypeid,
        userid=user.userid,
        actionid=action.actionid,
        media_type_updated=media.updated,
        user_media_attached=user.updated,
        action_created=action.created,
    )
    logger.info("zbx_setup_completed", **result.model_dump())
    return result


async def run_setup_from_settings(settings: Settings) -> SetupResult:
    return await run_setup(settings.zabbix, settings.telegram)
