"""
配置加载模块

发票模板配置（profile）保存在 order_config.json，每个键一套抽取参数：
    {
      "default": {"schema": "split", "quantity_mode": "marker", ...},
      "legacy":  {"schema": "single", "quantity_mode": "fixed_index", ...}
    }

环境变量覆盖：ORDER_SHEET_URL、ORDER_LINE_TOLERANCE
"""

import os
import json
import logging
from dataclasses import dataclass, fields
from typing import Optional

from .extractor import QUANTITY_LINE_INDEX, QUANTITY_MARKER, QUANTITY_MODES
from .models import SCHEMA_SPLIT, SCHEMAS
from .preprocessor import LINE_TOLERANCE
from .reader import Y_AXIS_PDF, Y_AXES
from .sheets import DEFAULT_TIMEOUT

logger = logging.getLogger("order_extract")


def _get_env(key: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(key)
    if value is not None:
        value = value.strip()
        if value == "":
            return default
        return value
    return default


@dataclass
class ExtractionConfig:
    line_tolerance: float = LINE_TOLERANCE
    schema: str = SCHEMA_SPLIT
    quantity_mode: str = QUANTITY_MARKER
    quantity_line_index: int = QUANTITY_LINE_INDEX
    y_axis: str = Y_AXIS_PDF
    sheet_url: str = ""
    sheet_timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self):
        self.line_tolerance = float(self.line_tolerance)
        self.quantity_line_index = int(self.quantity_line_index)
        self.sheet_timeout = float(self.sheet_timeout)
        if self.line_tolerance <= 0:
            raise ValueError("line_tolerance must be positive")
        if self.quantity_line_index < 0:
            raise ValueError("quantity_line_index must not be negative")
        if self.schema not in SCHEMAS:
            raise ValueError(f"schema must be one of {SCHEMAS}, got {self.schema!r}")
        if self.quantity_mode not in QUANTITY_MODES:
            raise ValueError(f"quantity_mode must be one of {QUANTITY_MODES}, got {self.quantity_mode!r}")
        if self.y_axis not in Y_AXES:
            raise ValueError(f"y_axis must be one of {Y_AXES}, got {self.y_axis!r}")


def apply_env_overrides(config: ExtractionConfig) -> ExtractionConfig:
    url = _get_env("ORDER_SHEET_URL")
    if url is not None:
        config.sheet_url = url
    tolerance = _get_env("ORDER_LINE_TOLERANCE")
    if tolerance is not None:
        try:
            config.line_tolerance = float(tolerance)
        except ValueError as exc:
            raise ValueError("Environment variable ORDER_LINE_TOLERANCE must be a number") from exc
        if config.line_tolerance <= 0:
            raise ValueError("Environment variable ORDER_LINE_TOLERANCE must be positive")
    return config


def load_config(config_path: str = None, config_key: str = "default") -> ExtractionConfig:
    """
    加载模板配置

    Args:
        config_path: 配置文件路径，默认为 order_config.json
        config_key: 配置键名，默认为 "default"

    Returns:
        ExtractionConfig；文件或键不存在时记录错误并返回默认配置

    Raises:
        ValueError: 配置值不合法或包含未知项
    """
    if config_path is None:
        # 默认配置文件路径：与 config.py 同目录下的 ../order_config.json
        current_dir = os.path.dirname(os.path.abspath(__file__))
        config_path = os.path.join(current_dir, "..", "order_config.json")

    values = {}
    if not os.path.exists(config_path):
        logger.error(f"Order config file not found: {config_path}, using defaults")
    else:
        with open(config_path, "r", encoding="utf-8") as f:
            config = json.load(f)

        if config_key not in config:
            logger.error(f"Config key '{config_key}' not found in {config_path}, using defaults")
        else:
            values = config[config_key]
            logger.info(f"Loaded order config '{config_key}' from {config_path}: {values}")

    known = {f.name for f in fields(ExtractionConfig)}
    unknown = set(values) - known
    if unknown:
        raise ValueError(f"Unknown config option(s) in '{config_key}': {sorted(unknown)}")

    return apply_env_overrides(ExtractionConfig(**values))
