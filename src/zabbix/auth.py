"""Login negotiation across Zabbix API versions.

Zabbix 5.4 renamed the ``user.login`` parameter ``user`` to ``username`` and
6.4 dropped the old name. The new schema is tried first; only a rejection of
the parameter schema itself triggers a retry with the old one.
"""

from __future__ import annotations

import structlog

from src.zabbix.exceptions import ZbxRpcError
from src.zabbix.transport import ZabbixTransport
from src.zabbix.types import LoginSchema

logger = structlog.stdlib.get_logger()

LOGIN_METHOD = "user.login"


def login_params(schema: LoginSchema, user: str, password: str) -> dict[str, str]:
    if schema is LoginSchema.NEW:
        return {"username": user, "password": password}
    return {"user": user, "password": password}


async def login(transport: ZabbixTransport, user: str, password: str) -> LoginSchema:
    """Authenticate and store the token on ``transport.session``.

    Returns:
        The schema the server accepted.

    Raises:
        ZbxError: Any failure other than a parameter-schema rejection of the
            first attempt, or any failure of the fallback attempt.
    """
    schema = LoginSchema.NEW
    try:
        token = await transport.call(LOGIN_METHOD, login_params(schema, user, password), str)
    except ZbxRpcError as exc:
        if not exc.is_parameter_schema_error:
            raise
        logger.info("zbx_login_fallback", code=exc.code, reason=exc.message)
        schema = LoginSchema.OLD
        token = await transport.call(LOGIN_METHOD, login_params(schema, user, password), str)

    transport.session.token = token
    transport.session.schema = schema
    logger.info("zbx_logged_in", user=user, schema=schema.value)
    return schema
