"""
PDF 发票订单抽取工具

模块架构（按数据流）：
    reader.py       → PDF 文本片段读取（PyMuPDF，带基线坐标）
    preprocessor.py → 行聚类（按 y 分组、按 x 排序）
    extractor.py    → 订单字段抽取（规则表、Ship To 版式解析）
    validator.py    → 复核提示（订单级、字段级、集合级）
    writer.py       → 输出模块（CSV/XLSX/JSON、工作簿追加、JSON 信封）
    sheets.py       → 远程表格追加
    config.py       → 模板配置
    pipeline.py     → 批处理（逐页、整体替换）

公共 API：
    cluster_lines       - 文本片段聚类成行
    extract_order       - 单页行序列抽取订单
    process_document    - 整个 PDF 抽取订单
    validate_orders     - 复核提示
    write_auto          - 格式化输出
    SheetAppender       - 远程追加
"""

__version__ = "1.0.0"

# === Models ===
from .models import (
    PositionedFragment,
    Order,
    OrderCollection,
    EXPORT_COLUMNS,
    ENVELOPE_FIELDS,
)

# === Reader 模块 ===
from .reader import (
    PdfReadError,
    ensure_file_exists,
    iter_page_fragments,
)

# === Preprocessor 模块 ===
from .preprocessor import (
    cluster_lines,
    clean_text,
)

# === Extractor 模块 ===
from .extractor import (
    extract_order,
    parse_ship_to,
    normalize_phone,
)

# === Validator 模块 ===
from .validator import (
    validate_order,
    validate_orders,
)

# === Writer 模块 ===
from .writer import (
    export_rows,
    build_envelope,
    append_xlsx,
    write_json,
    write_csv,
    write_xlsx,
    write_auto,
)

# === Sheets / Config / Pipeline ===
from .sheets import SheetAppender, SheetAppendError
from .config import ExtractionConfig, load_config
from .pipeline import OrderBatchError, process_document, process_page

__all__ = [
    # 版本
    "__version__",

    # Models
    "PositionedFragment",
    "Order",
    "OrderCollection",
    "EXPORT_COLUMNS",
    "ENVELOPE_FIELDS",

    # Reader
    "PdfReadError",
    "ensure_file_exists",
    "iter_page_fragments",

    # Preprocessor
    "cluster_lines",
    "clean_text",

    # Extractor
    "extract_order",
    "parse_ship_to",
    "normalize_phone",

    # Validator
    "validate_order",
    "validate_orders",

    # Writer
    "export_rows",
    "build_envelope",
    "append_xlsx",
    "write_json",
    "write_csv",
    "write_xlsx",
    "write_auto",

    # Sheets / Config / Pipeline
    "SheetAppender",
    "SheetAppendError",
    "ExtractionConfig",
    "load_config",
    "OrderBatchError",
    "process_document",
    "process_page",
]
