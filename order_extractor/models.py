"""
数据模型模块

职责：
- PositionedFragment：页面上一段带坐标的文本
- Order：一页发票抽取出的订单记录（所有字段始终存在）
- OrderCollection：调用方持有的订单集合（整体替换、按字段编辑）
- 两种字段命名方案（split / single）与导出列顺序
"""

import logging
from dataclasses import dataclass, field, fields
from typing import Dict, Iterator, List, NamedTuple, Optional

logger = logging.getLogger("order_extract")

SCHEMA_SPLIT = "split"
SCHEMA_SINGLE = "single"
SCHEMAS = (SCHEMA_SPLIT, SCHEMA_SINGLE)

DEFAULT_ADDRESS_TYPE = "Residential"
DEFAULT_QUANTITY = "1"
DEFAULT_SHIP_VIA = "Misc. Common Carrier"

# record key -> Order attribute
SPLIT_FIELDS: Dict[str, str] = {
    "page": "page",
    "date": "date",
    "custNum": "cust_num",
    "poNumber": "po_number",
    "customerName": "customer_name",
    "shipToName": "ship_to_name",
    "customerAddress": "customer_address",
    "shipToAddress": "ship_to_address",
    "phone": "phone",
    "addressType": "address_type",
    "modelNumber": "model_number",
    "internetNumber": "internet_number",
    "quantity": "quantity",
    "description": "description",
    "shipVia": "ship_via",
}

# Legacy layout: "customerAddress" carries the ship-to name, "address" the full address.
SINGLE_FIELDS: Dict[str, str] = {
    "custNum": "cust_num",
    "poNumber": "po_number",
    "date": "date",
    "page": "page",
    "customerName": "customer_name",
    "customerAddress": "ship_to_name",
    "address": "customer_address",
    "street": "street",
    "city": "city",
    "state": "state",
    "zip": "zip_code",
    "phone": "phone",
    "addressType": "address_type",
    "modelNumber": "model_number",
    "internetNumber": "internet_number",
    "quantity": "quantity",
    "description": "description",
    "shipVia": "ship_via",
}

SCHEMA_FIELDS = {SCHEMA_SPLIT: SPLIT_FIELDS, SCHEMA_SINGLE: SINGLE_FIELDS}

# Remote append payload keys, in sheet column order
ENVELOPE_FIELDS: List[str] = [
    "page", "date", "custNum", "poNumber", "customerName", "shipToName",
    "customerAddress", "shipToAddress", "phone", "addressType",
    "modelNumber", "internetNumber", "quantity",
]

# Tabular export header -> split record key
EXPORT_COLUMNS: Dict[str, str] = {
    "Page": "page",
    "Date": "date",
    "Cust Order #": "custNum",
    "PO Number": "poNumber",
    "Customer Name": "customerName",
    "Ship To Name": "shipToName",
    "Customer Address": "customerAddress",
    "Ship To Address": "shipToAddress",
    "Phone": "phone",
    "Address Type": "addressType",
    "Model Number": "modelNumber",
    "Internet Num": "internetNumber",
    "Qty Shipped": "quantity",
}


class PositionedFragment(NamedTuple):
    """页面上的一段文本（基线坐标）"""
    text: str
    x: float
    y: float


def fallback_cust_num(page: int) -> str:
    return f"ORDER-{page}"


def format_address(street: str = "", city: str = "", state: str = "", zip_code: str = "") -> str:
    """
    拼接完整地址。

    Example:
        ("123 Main St", "Springfield", "IL", "62704") → "123 Main St, Springfield, IL 62704"
    """
    region = " ".join(p for p in (state, zip_code) if p)
    return ", ".join(p for p in (street, city, region) if p)


def _check_schema(schema: str) -> Dict[str, str]:
    if schema not in SCHEMA_FIELDS:
        raise ValueError(f"Unknown schema: {schema!r} (expected one of {SCHEMAS})")
    return SCHEMA_FIELDS[schema]


@dataclass
class Order:
    """One order extracted from one invoice page."""

    page: int
    cust_num: str = ""
    po_number: str = ""
    date: str = ""
    customer_name: str = ""
    ship_to_name: str = ""
    customer_address: str = ""
    ship_to_address: str = ""
    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    phone: str = ""
    address_type: str = DEFAULT_ADDRESS_TYPE
    variant: str = DEFAULT_ADDRESS_TYPE
    model_number: str = ""
    description: str = ""
    internet_number: str = ""
    quantity: str = DEFAULT_QUANTITY
    ship_via: str = DEFAULT_SHIP_VIA
    notes: List[str] = field(default_factory=list)

    def __post_init__(self):
        if not self.cust_num:
            self.cust_num = fallback_cust_num(self.page)

    def to_record(self, schema: str = SCHEMA_SPLIT) -> Dict[str, object]:
        mapping = _check_schema(schema)
        return {key: getattr(self, attr) for key, attr in mapping.items()}

    def set_field(self, name: str, value, schema: str = SCHEMA_SPLIT) -> None:
        """
        按字段名写入（用户编辑）。

        Raises:
            KeyError: 字段名不属于该方案
            ValueError: page 不是整数
        """
        mapping = _check_schema(schema)
        if name not in mapping:
            raise KeyError(f"Unknown field {name!r} for schema {schema!r}")
        attr = mapping[name]
        if attr == "page":
            value = int(value)
        else:
            value = "" if value is None else str(value)
        setattr(self, attr, value)

    def copy(self) -> "Order":
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values["notes"] = list(self.notes)
        return Order(**values)


class OrderCollection:
    """
    调用方持有的订单集合。

    批处理时先写入临时集合，成功后通过 replace() 一次性替换。
    """

    def __init__(self, orders: Optional[List[Order]] = None):
        self._orders: List[Order] = list(orders or [])

    def __len__(self) -> int:
        return len(self._orders)

    def __iter__(self) -> Iterator[Order]:
        return iter(self._orders)

    def __getitem__(self, index: int) -> Order:
        return self._orders[index]

    def __bool__(self) -> bool:
        return bool(self._orders)

    def append(self, order: Order) -> None:
        self._orders.append(order)

    def clear(self) -> None:
        self._orders = []

    def replace(self, other: "OrderCollection") -> None:
        self._orders = list(other)
        logger.debug(f"Collection replaced: {len(self._orders)} order(s)")

    def update(self, index: int, name: str, value, schema: str = SCHEMA_SPLIT) -> None:
        self._orders[index].set_field(name, value, schema)

    def to_records(self, schema: str = SCHEMA_SPLIT) -> List[Dict[str, object]]:
        return [o.to_record(schema) for o in self._orders]
