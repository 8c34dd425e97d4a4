"""
内容抽取算法模块

职责：
- 基于规则的字段提取：每个字段一条 (predicate, extract) 规则，按固定优先级执行
- Ship To 行解析（住宅 / 商业两种版式）
- 电话号码标准化
- 只做提取，不做校验（校验由 validator.py 负责）

每条规则扫描整页行序列，第一条满足 predicate 的行胜出；
extract 返回要写入 Order 的字段，取不到值时返回空字典，字段保持默认值。
"""

import re
import logging
from typing import Callable, Dict, Iterable, List, NamedTuple, Optional, Tuple

from .models import (
    Order,
    format_address,
)

logger = logging.getLogger("order_extract")

QUANTITY_MARKER = "marker"
QUANTITY_FIXED_INDEX = "fixed_index"
QUANTITY_MODES = (QUANTITY_MARKER, QUANTITY_FIXED_INDEX)
QUANTITY_LINE_INDEX = 24

HOME_DEPOT = "Home Depot"
COMMERCIAL = "Commercial"
RESIDENTIAL = "Residential"

STREET_SUFFIXES = (
    "Way", "Rd", "St", "Street", "Avenue", "Ave", "Court", "Drive", "Dr",
    "Lane", "Ln", "Boulevard", "Blvd", "Circle", "Cir",
)
UNIT_TOKENS = ("Ste", "Suite", "Apt", "Unit")

PAGE_RE = re.compile(r"Page:\s*([0-9]{1,9})\b", re.ASCII)
PO_RE = re.compile(r"PO #\s*(\S+)")
CUST_NUM_RE = re.compile(r"Customer Order #:\s*([A-Za-z0-9-]+)")
CUSTOMER_NAME_RE = re.compile(r"Customer Name:\s*(.+)$")
SHIP_TO_NAME_RE = re.compile(r"Ship To:\s*([^\d]*?)\s*\d", re.ASCII)
STREET_RE = re.compile(
    r"\d+\s+[A-Za-z0-9][A-Za-z.'\s]*?\b(?:%s)\b\.?(?:\s+(?:%s)\.?\s*#?\s*[0-9A-Za-z-]+)?"
    % ("|".join(STREET_SUFFIXES), "|".join(UNIT_TOKENS)),
    re.IGNORECASE | re.ASCII,
)
STATE_ZIP_RE = re.compile(r",\s*([A-Z]{2})\s+(\d{5})(?:-\d{4})?\b", re.ASCII)
PHONE_TAIL_RE = re.compile(r"^\s*([(\d][\d()\s.+-]*\d)", re.ASCII)
PHONE_ANY_RE = re.compile(r"\(?\d{3}\)?[\s.-]*\d{3}[\s.-]?\d{4}", re.ASCII)
MODEL_RE = re.compile(r"Model Number\s+(.+)$")
DATE_RE = re.compile(r"\d{1,2}/\d{1,2}/(?:\d{2}|\d{4})", re.ASCII)
INTERNET_RE = re.compile(r"Internet Number\s*:?\s*(\d+)", re.ASCII)
DIGITS_RE = re.compile(r"[0-9]+")

SHIP_VIA_MARKER = "Misc. Common Carrier"
COMMERCIAL_ASSUMPTION_NOTE = (
    "customer city/state/zip copied from the Home Depot store address"
)


class FieldRule(NamedTuple):
    """单字段规则：predicate(index, line) 选行，extract(lines, index) 取值"""
    name: str
    predicate: Callable[[int, str], bool]
    extract: Callable[[List[str], int], Dict[str, object]]


def apply_rule(rule: FieldRule, lines: List[str]) -> Dict[str, object]:
    """
    执行单条规则。

    Returns:
        字段字典，未命中或取不到值时为空字典
    """
    for i, line in enumerate(lines):
        if rule.predicate(i, line):
            values = rule.extract(lines, i) or {}
            logger.debug(f"[EXTRACT] rule '{rule.name}' matched line {i}: {values}")
            return values
    return {}


#
# ========== 电话 / 地址辅助函数 ==========
#

def normalize_phone(raw: str) -> str:
    """
    电话标准化：去掉非数字后恰好 10 位则格式化为 (XXX) XXX-XXXX，否则原样返回。

    Example:
        "217.555.0100" → "(217) 555-0100"
        "+1 217 555 0100" → "+1 217 555 0100"
    """
    raw = raw.strip()
    digits = re.sub(r"[^0-9]", "", raw)
    if len(digits) == 10:
        return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
    return raw


def _phone_after(text: str) -> str:
    m = PHONE_TAIL_RE.match(text)
    if m:
        return normalize_phone(m.group(1))
    return ""


def split_street_city(head: str) -> Tuple[str, str]:
    """
    把 "<街道> <城市>" 拆开。

    优先用街道后缀规则；没有后缀时把最后一个词当城市，
    街道从第一个数字开始。

    Example:
        "123 Main St Salt Lake City" → ("123 Main St", "Salt Lake City")
        "900 Industrial Pkwy Atlanta" → ("900 Industrial Pkwy", "Atlanta")
    """
    head = head.strip(" ,")
    m = STREET_RE.search(head)
    if m:
        return m.group(0).strip(), head[m.end():].strip(" ,")

    digit = re.search(r"[0-9]", head)
    if digit:
        head = head[digit.start():]
    words = head.split()
    if len(words) < 2:
        return "", head
    return " ".join(words[:-1]), words[-1]


def parse_locality(text: str) -> Dict[str, str]:
    """
    解析 "<街道> <城市>, <州> <邮编> [电话]"。

    Returns:
        {"street", "city", "state", "zip_code", "phone"}，取不到的为空字符串
    """
    out = {"street": "", "city": "", "state": "", "zip_code": "", "phone": ""}
    m = STATE_ZIP_RE.search(text)
    if not m:
        street = STREET_RE.search(text)
        if street:
            out["street"] = street.group(0).strip()
        phone = PHONE_ANY_RE.search(text[street.end():] if street else text)
        if phone:
            out["phone"] = normalize_phone(phone.group(0))
        return out

    out["street"], out["city"] = split_street_city(text[:m.start()])
    out["state"], out["zip_code"] = m.group(1), m.group(2)
    out["phone"] = _phone_after(text[m.end():])
    return out


def parse_ship_to(line: str) -> Dict[str, object]:
    """
    解析 Ship To 行（姓名 + 地址 + 电话挤在一行）。

    版式：
        - 含 "Home Depot"：商业。客户街道取 "Home Depot" 之前第一个带后缀的街道，
          收货地址取 "Home Depot" 之后的门店地址；客户的城市/州/邮编沿用门店的
          （推测，写入 notes 以便人工复核）
        - 否则：住宅。同一个地址同时作为客户地址和收货地址

    Example:
        "Ship To: John Doe 123 Main St Springfield, IL 62704 (217) 555-0100"
        → ship_to_name="John Doe", customer_address="123 Main St, Springfield, IL 62704",
          phone="(217) 555-0100", variant="Residential"
    """
    start = line.find("Ship To:")
    body = line[start + len("Ship To:"):] if start >= 0 else line

    values: Dict[str, object] = {}
    m = SHIP_TO_NAME_RE.search(line)
    values["ship_to_name"] = m.group(1).strip() if m else ""

    hd = body.find(HOME_DEPOT)
    if hd >= 0:
        before, after = body[:hd], body[hd + len(HOME_DEPOT):]
        store = parse_locality(after)

        street = STREET_RE.search(before)
        if street:
            cust_street = street.group(0).strip()
        else:
            digit = re.search(r"[0-9]", before)
            cust_street = before[digit.start():].strip() if digit else ""

        city, state, zip_code = store["city"], store["state"], store["zip_code"]
        store_street = " ".join(p for p in (HOME_DEPOT, store["street"]) if p)
        values.update(
            variant=COMMERCIAL,
            address_type=COMMERCIAL,
            street=cust_street,
            city=city,
            state=state,
            zip_code=zip_code,
            phone=store["phone"],
            customer_address=format_address(cust_street, city, state, zip_code),
            ship_to_address=format_address(store_street, city, state, zip_code),
            notes=[COMMERCIAL_ASSUMPTION_NOTE],
        )
        return values

    loc = parse_locality(body)
    address = format_address(loc["street"], loc["city"], loc["state"], loc["zip_code"])
    values.update(
        variant=RESIDENTIAL,
        address_type=RESIDENTIAL,
        street=loc["street"],
        city=loc["city"],
        state=loc["state"],
        zip_code=loc["zip_code"],
        phone=loc["phone"],
        customer_address=address,
        ship_to_address=address,
    )
    return values


#
# ========== 字段规则 ==========
#

def _page(lines, i):
    return {"page": int(PAGE_RE.search(lines[i]).group(1))}


def _header(lines, i):
    line = lines[i]
    values = {}
    m = PO_RE.search(line)
    if m:
        values["po_number"] = m.group(1)
    m = CUST_NUM_RE.search(line)
    if m:
        values["cust_num"] = m.group(1)
    m = CUSTOMER_NAME_RE.search(line)
    if m:
        values["customer_name"] = m.group(1).strip()
    return values


def _model(lines, i):
    m = MODEL_RE.search(lines[i].strip())
    return {"model_number": m.group(1).strip()} if m else {}


def _quantity_after_marker(lines, i):
    if i + 1 < len(lines):
        value = lines[i + 1].strip()
        if DIGITS_RE.fullmatch(value):
            return {"quantity": value}
    return {}


def _quantity_at(lines, i):
    value = lines[i].strip()
    return {"quantity": value} if DIGITS_RE.fullmatch(value) else {}


def _internet(lines, i):
    m = INTERNET_RE.search(lines[i])
    return {"internet_number": m.group(1)} if m else {}


PAGE_RULE = FieldRule(
    "page",
    lambda i, l: PAGE_RE.search(l) is not None,
    _page,
)

# 按优先级排列；address_type 排在 ship_to 之后，显式的行覆盖版式默认值
FIELD_RULES: List[FieldRule] = [
    FieldRule(
        "header",
        lambda i, l: "PO #" in l and "Customer Order #:" in l and "Customer Name:" in l,
        _header,
    ),
    FieldRule("ship_to", lambda i, l: "Ship To:" in l, lambda lines, i: parse_ship_to(lines[i])),
    FieldRule(
        "model_number",
        lambda i, l: i > 5 and l.strip().startswith("Model Number") and len(l) < 30,
        _model,
    ),
    FieldRule(
        "description",
        lambda i, l: "R-22" in l or ("Insulation" in l and len(l) > 20),
        lambda lines, i: {"description": lines[i].strip()},
    ),
    FieldRule(
        "date",
        lambda i, l: DATE_RE.fullmatch(l.strip()) is not None,
        lambda lines, i: {"date": lines[i].strip()},
    ),
    FieldRule(
        "ship_via",
        lambda i, l: SHIP_VIA_MARKER in l,
        lambda lines, i: {"ship_via": SHIP_VIA_MARKER},
    ),
    FieldRule(
        "address_type",
        lambda i, l: l.strip() in (RESIDENTIAL, COMMERCIAL),
        lambda lines, i: {"address_type": lines[i].strip()},
    ),
    FieldRule("internet_number", lambda i, l: "Internet Number" in l, _internet),
]


def quantity_rule(mode: str = QUANTITY_MARKER, line_index: int = QUANTITY_LINE_INDEX) -> FieldRule:
    """
    数量规则（两种策略按发票模板版本二选一，不合并）。

    Args:
        mode: "marker" 取 "Qty Shipped" 的下一行；"fixed_index" 直接取第 line_index 行
        line_index: fixed_index 模式的行号（0-based）
    """
    if mode == QUANTITY_MARKER:
        return FieldRule("quantity", lambda i, l: l.strip() == "Qty Shipped", _quantity_after_marker)
    if mode == QUANTITY_FIXED_INDEX:
        return FieldRule("quantity", lambda i, l: i == line_index, _quantity_at)
    raise ValueError(f"Unknown quantity mode: {mode!r} (expected one of {QUANTITY_MODES})")


def extract_order(
    lines: Iterable[str],
    page_index: int,
    quantity_mode: str = QUANTITY_MARKER,
    quantity_line_index: int = QUANTITY_LINE_INDEX,
    rules: Optional[List[FieldRule]] = None,
) -> Order:
    """
    从一页的行序列抽取一条订单。

    任何字段取不到时都保留默认值，不抛异常：
        custNum → "ORDER-<page>"，addressType → "Residential"，quantity → "1"，其余为空字符串

    Args:
        lines: cluster_lines 输出的行
        page_index: 页码（1-based），页内有 "Page: N" 时被覆盖
        quantity_mode: 见 quantity_rule
        quantity_line_index: 见 quantity_rule
        rules: 自定义规则表，默认 FIELD_RULES

    Returns:
        Order
    """
    lines = ["" if l is None else str(l) for l in lines]
    for i, line in enumerate(lines):
        logger.debug(f"Page {page_index} line {i}: \"{line}\"")

    page = apply_rule(PAGE_RULE, lines).get("page", page_index)
    order = Order(page=page)

    table = list(FIELD_RULES if rules is None else rules)
    table.append(quantity_rule(quantity_mode, quantity_line_index))

    for rule in table:
        values = apply_rule(rule, lines)
        if not values:
            logger.debug(f"[EXTRACT] Page {page}: rule '{rule.name}' found nothing, keeping defaults")
        for attr, value in values.items():
            setattr(order, attr, value)

    logger.info(
        f"[EXTRACT] Page {page}: custNum={order.cust_num} po={order.po_number!r} "
        f"variant={order.variant} qty={order.quantity}"
    )
    return order
