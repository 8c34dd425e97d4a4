"""
远程表格追加模块

把订单信封 {"orders": [...]} POST 到表格追加接口（Web App URL）。
接口返回 {"success": bool, "rowsAdded": int, "error": str}。
"""

import logging
from typing import Any, Dict, Iterable, Optional

import httpx

from .models import Order
from .writer import build_envelope

logger = logging.getLogger("order_extract")

DEFAULT_TIMEOUT = 30.0


class SheetAppendError(RuntimeError):
    """追加失败（未配置、网络错误或接口返回 success=false）"""
    pass


class SheetAppender:
    """Appends extracted orders to a remote spreadsheet endpoint."""

    def __init__(
        self,
        url: str,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.url = (url or "").strip()
        self.timeout = timeout
        self._client = client or httpx.Client(
            timeout=timeout,
            follow_redirects=True,
            headers={"Content-Type": "application/json"},
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "SheetAppender":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def append(self, orders: Iterable[Order]) -> Dict[str, Any]:
        """
        追加订单。

        Returns:
            接口返回的 JSON（无法解析时为 {"success": True, "rowsAdded": n}）

        Raises:
            SheetAppendError: URL 未配置、没有订单、请求失败或接口报错
        """
        if not self.url:
            raise SheetAppendError("sheet URL is not configured")

        envelope = build_envelope(orders)
        count = len(envelope["orders"])
        if count == 0:
            raise SheetAppendError("no orders to append")

        logger.info(f"Sending {count} order(s) to {self.url}")
        try:
            response = self._client.post(self.url, json=envelope)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error(f"Sheet append failed: {exc}")
            raise SheetAppendError(str(exc)) from exc

        content_type = response.headers.get("content-type", "")
        if "text/html" in content_type:
            # 通常是部署权限不对时跳转到的登录页
            logger.error(f"Sheet endpoint returned an HTML page from {response.url}")
            raise SheetAppendError(
                f"sheet endpoint returned HTML ({content_type}); check the web app access settings"
            )

        try:
            reply = response.json()
        except ValueError:
            logger.warning(
                f"Sheet endpoint returned a non-JSON body ({content_type or 'no content-type'}), "
                f"assuming {count} row(s) were added"
            )
            return {"success": True, "rowsAdded": count}

        if not reply.get("success", False):
            error = reply.get("error") or "unknown error"
            logger.error(f"Sheet endpoint rejected the data: {error}")
            raise SheetAppendError(error)

        logger.info(reply.get("message") or f"Appended {reply.get('rowsAdded', count)} row(s)")
        return reply
