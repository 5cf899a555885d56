import logging
from typing import Optional

import httpx

from ..core.config import config

logger = logging.getLogger(__name__)


def get_async_http_client(
    base_url: str = "",
    auth: Optional[httpx.Auth] = None,
    connect_timeout: float = None,
    read_timeout: float = None,
    verify: bool = True,
) -> httpx.AsyncClient:
    """
    Returns a configured httpx.AsyncClient with:
    - Default timeouts (connect and read).
    - Standard User-Agent and JSON Accept headers.
    - Optional authentication (the Atlas API uses HTTP digest).
    """
    c_timeout = connect_timeout if connect_timeout is not None else config.DEFAULT_TIMEOUT_CONNECT
    r_timeout = read_timeout if read_timeout is not None else config.DEFAULT_TIMEOUT_READ

    timeout = httpx.Timeout(r_timeout, connect=c_timeout)

    headers = {"User-Agent": config.USER_AGENT, "Accept": "application/json"}

    return httpx.AsyncClient(
        base_url=base_url,
        auth=auth,
        timeout=timeout,
        headers=headers,
        verify=verify,
        follow_redirects=True,
    )
