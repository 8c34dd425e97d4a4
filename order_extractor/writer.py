"""
输出模块

职责：
- 订单导出为表格（CSV / XLSX，固定列顺序）
- 追加写入工作簿（表头缺失时先写表头）
- 远程追加用的 JSON 信封
- 统一输出接口，不包含业务逻辑
"""

import os
import csv
import json
import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from .models import ENVELOPE_FIELDS, EXPORT_COLUMNS, Order, SCHEMA_SPLIT

logger = logging.getLogger("order_extract")

DEFAULT_SHEET = "IMPORT"


def export_rows(orders: Iterable[Order]) -> List[Dict[str, Any]]:
    """
    订单转换为导出行（键为固定表头）。

    Returns:
        [{"Page": 1, "Date": "...", ..., "Qty Shipped": "1"}, ...]
    """
    rows = []
    for order in orders:
        record = order.to_record(SCHEMA_SPLIT)
        rows.append({header: record[key] for header, key in EXPORT_COLUMNS.items()})
    return rows


def build_envelope(orders: Iterable[Order]) -> Dict[str, List[Dict[str, Any]]]:
    """
    构造远程追加的 JSON 信封：{"orders": [{page, date, custNum, ...}, ...]}

    缺失值统一为空字符串。
    """
    payload = []
    for order in orders:
        record = order.to_record(SCHEMA_SPLIT)
        payload.append({
            key: "" if record.get(key) in (None, "") else record[key]
            for key in ENVELOPE_FIELDS
        })
    return {"orders": payload}


def default_export_name(today: Optional[date] = None) -> str:
    """home_depot_orders_<YYYY-MM-DD>.csv"""
    today = today or date.today()
    return f"home_depot_orders_{today.isoformat()}.csv"


def _columns(rows: List[Dict], fieldnames: Optional[List[str]]) -> List[str]:
    # 无数据时用订单表头
    if fieldnames is not None:
        return list(fieldnames)
    return list(rows[0]) if rows else list(EXPORT_COLUMNS)


def write_json(data: Any, file_path: str) -> None:
    with open(file_path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
    logger.info(f"Wrote JSON: {file_path}")


def write_jsonl(rows: List[Dict], file_path: str) -> None:
    with open(file_path, "w", encoding="utf-8") as f:
        f.writelines(json.dumps(r, ensure_ascii=False) + "\n" for r in rows)
    logger.info(f"Wrote JSONL: {file_path} ({len(rows)} rows)")


def write_csv(rows: List[Dict], file_path: str, fieldnames: Optional[List[str]] = None) -> None:
    """导出 CSV（UTF-8，表头为第一行的键；无数据时只写订单表头）"""
    with open(file_path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=_columns(rows, fieldnames))
        w.writeheader()
        w.writerows(rows)
    logger.info(f"Wrote CSV: {file_path} ({len(rows)} rows)")


def write_xlsx(rows: List[Dict], file_path: str, sheet_name: str = "Orders", fieldnames: List[str] = None) -> None:
    """输出 XLSX 文件（列名规则同 write_csv）"""
    df = pd.DataFrame(rows, columns=_columns(rows, fieldnames))
    df.to_excel(file_path, sheet_name=sheet_name, index=False)
    logger.info(f"Wrote XLSX: {file_path} ({len(rows)} rows)")


def _has_header(existing: pd.DataFrame) -> bool:
    if existing.empty or existing.shape[1] < 3:
        return False
    first = existing.iloc[0]
    return first.iloc[0] == "Page" and first.iloc[2] == "Cust Order #"


def append_xlsx(orders: Iterable[Order], file_path: str, sheet_name: str = DEFAULT_SHEET) -> int:
    """
    把订单追加到工作簿的指定工作表。

    工作表为空或第一行不是表头（A1 == "Page" 且 C1 == "Cust Order #"）时先写表头。

    Args:
        orders: 订单
        file_path: 工作簿路径（不存在则新建）
        sheet_name: 工作表名（默认 "IMPORT"）

    Returns:
        追加的数据行数
    """
    headers = list(EXPORT_COLUMNS)
    new_rows = [[row[h] for h in headers] for row in export_rows(orders)]

    existing = pd.DataFrame()
    book_exists = os.path.isfile(file_path)
    if book_exists:
        sheets = pd.read_excel(file_path, sheet_name=None, header=None, dtype=object)
        if sheet_name in sheets:
            existing = sheets[sheet_name].fillna("")

    block = ([headers] if not _has_header(existing) else []) + new_rows
    frames = [existing] if not existing.empty else []
    frames.append(pd.DataFrame(block))
    combined = pd.concat(frames, ignore_index=True).fillna("")

    if book_exists:
        with pd.ExcelWriter(file_path, engine="openpyxl", mode="a", if_sheet_exists="replace") as xw:
            combined.to_excel(xw, sheet_name=sheet_name, index=False, header=False)
    else:
        with pd.ExcelWriter(file_path, engine="openpyxl") as xw:
            combined.to_excel(xw, sheet_name=sheet_name, index=False, header=False)

    logger.info(f"Appended {len(new_rows)} row(s) to {file_path} [{sheet_name}]")
    return len(new_rows)


def print_records(data: Any, jsonl: bool = False) -> None:
    """输出到 stdout：jsonl=True 时每行一个对象（dump 用），否则为缩进 JSON"""
    if jsonl:
        for r in data:
            print(json.dumps(r, ensure_ascii=False))
    else:
        print(json.dumps(data, ensure_ascii=False, indent=2))


ROW_WRITERS = {".jsonl": write_jsonl, ".csv": write_csv, ".xlsx": write_xlsx}


def write_auto(data: Any, file_path: str) -> None:
    """按扩展名输出：.json 接受任意数据，.jsonl/.csv/.xlsx 需要行列表；其他扩展名抛 ValueError"""
    ext = os.path.splitext(file_path)[1].lower()
    if ext == ".json":
        write_json(data, file_path)
        return
    if ext not in ROW_WRITERS:
        raise ValueError(f"Unsupported output format: {ext or file_path!r}")
    if not isinstance(data, list):
        raise ValueError(f"{ext} output needs a list of rows, got {type(data).__name__}")
    ROW_WRITERS[ext](data, file_path)
