"""Zabbix JSON-RPC client and idempotent Telegram alerting setup."""

from src.zabbix.actions import ActionOutcome, build_action, reconcile_action
from src.zabbix.auth import login
from src.zabbix.exceptions import (
    ZbxConfigError,
    ZbxDomainError,
    ZbxError,
    ZbxProtocolError,
    ZbxRpcError,
    ZbxTransportError,
)
from src.zabbix.media import MediaTypeOutcome, apply_token, reconcile_media_type
from src.zabbix.setup import SetupResult, run_setup, run_setup_from_settings
from src.zabbix.transport import Session, ZabbixTransport
from src.zabbix.users import UserOutcome, merge_media, reconcile_user_media

__all__ = [
    "ActionOutcome",
    "MediaTypeOutcome",
    "Session",
    "SetupResult",
    "UserOutcome",
    "ZabbixTransport",
    "ZbxConfigError",
    "ZbxDomainError",
    "ZbxError",
    "ZbxProtocolError",
    "ZbxRpcError",
    "ZbxTransportError",
    "apply_token",
    "build_action",
    "login",
    "merge_media",
    "reconcile_action",
    "reconcile_media_type",
    "reconcile_user_media",
    "run_setup",
    "run_setup_from_settings",
]
