"""
数据校验模块

包含三层校验逻辑：订单级、字段级、集合级。
校验只产出提示信息，供人工复核，不修改数据、不抛异常。
"""

import re
from collections import Counter
from typing import Iterable, List

from .models import Order, fallback_cust_num

PHONE_FORMAT_RE = re.compile(r"\(\d{3}\) \d{3}-\d{4}", re.ASCII)

# (Order 属性, 显示名)
REVIEW_FIELDS = [
    ("po_number", "poNumber"),
    ("date", "date"),
    ("customer_name", "customerName"),
    ("ship_to_name", "shipToName"),
    ("customer_address", "customerAddress"),
    ("model_number", "modelNumber"),
]


def validate_order(order: Order) -> List[str]:
    """
    校验单条订单。

    校验层级：
        1. 订单级：custNum 仍是 ORDER-<page> 兜底值；quantity 不是纯数字
        2. 字段级：常用字段为空；电话不是 (XXX) XXX-XXXX 格式
        3. 推测：抽取时记录的 notes（如商业地址的城市/州/邮编沿用门店）

    Args:
        order: 订单

    Returns:
        提示信息列表
    """
    warnings = []
    prefix = f"Page {order.page} (Cust Order # '{order.cust_num}')"

    # 层级 1：订单级
    if order.cust_num == fallback_cust_num(order.page):
        warnings.append(
            f"[WARNING] {prefix}: Customer Order # not found, using fallback '{order.cust_num}'"
        )
    if not re.fullmatch(r"[0-9]+", order.quantity or ""):
        warnings.append(f"[ERROR] {prefix}: quantity '{order.quantity}' is not a whole number")

    # 层级 2：字段级
    for attr, label in REVIEW_FIELDS:
        if not getattr(order, attr):
            warnings.append(f"[WARNING] {prefix}: {label} is empty")

    if order.phone and not PHONE_FORMAT_RE.fullmatch(order.phone):
        warnings.append(f"[WARNING] {prefix}: phone '{order.phone}' is not in (XXX) XXX-XXXX form")

    # 层级 3：推测
    for note in order.notes:
        warnings.append(f"[REVIEW] {prefix}: {note}")

    return warnings


def validate_orders(orders: Iterable[Order]) -> List[str]:
    """
    校验订单集合：逐条校验 + 跨页重复检查（custNum、页码）。

    Returns:
        提示信息列表
    """
    orders = list(orders)
    warnings = []
    for order in orders:
        warnings.extend(validate_order(order))

    cust_counts = Counter(o.cust_num for o in orders)
    for cust_num, n in cust_counts.items():
        if n > 1:
            pages = [o.page for o in orders if o.cust_num == cust_num]
            warnings.append(f"[WARNING] Cust Order # '{cust_num}' appears on {n} pages: {pages}")

    page_counts = Counter(o.page for o in orders)
    for page, n in page_counts.items():
        if n > 1:
            warnings.append(f"[WARNING] Page number {page} appears {n} times")

    return warnings
