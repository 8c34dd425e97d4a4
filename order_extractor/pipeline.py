"""
批处理模块

数据流（每页）：reader → preprocessor.cluster_lines → extractor.extract_order

页面严格顺序处理；结果先写入临时集合，全部成功后一次性替换调用方的集合。
任何一页失败：清空调用方集合，抛出 OrderBatchError，不保留部分结果、不重试。
"""

import logging
from contextlib import closing
from typing import Iterable, List, Optional

from .config import ExtractionConfig
from .extractor import extract_order
from .models import Order, OrderCollection, PositionedFragment
from .preprocessor import cluster_lines
from .reader import ensure_file_exists, iter_page_fragments

logger = logging.getLogger("order_extract")


class OrderBatchError(RuntimeError):
    """整批处理失败（已清空结果集合）"""
    pass


def process_page(
    fragments: Iterable[PositionedFragment],
    page_index: int,
    config: Optional[ExtractionConfig] = None,
) -> Order:
    """
    处理单页：片段聚类成行，再抽取订单。

    Args:
        fragments: 该页的文本片段
        page_index: 页码（1-based）
        config: 抽取配置，默认 ExtractionConfig()

    Returns:
        Order
    """
    config = config or ExtractionConfig()
    lines = list(cluster_lines(fragments, tolerance=config.line_tolerance))
    logger.debug(f"[PIPELINE] Page {page_index}: {len(lines)} line(s)")
    return extract_order(
        lines,
        page_index,
        quantity_mode=config.quantity_mode,
        quantity_line_index=config.quantity_line_index,
    )


def read_page_lines(
    pdf_path: str,
    config: Optional[ExtractionConfig] = None,
    pages: Optional[List[int]] = None,
) -> List[dict]:
    """
    读取每页聚类后的行（调试用）。

    Returns:
        [{"page": int, "index": int, "text": str}, ...]，index 从 0 开始
    """
    config = config or ExtractionConfig()
    rows = []
    with closing(iter_page_fragments(pdf_path, pages=pages, y_axis=config.y_axis)) as it:
        for page_num, frags in it:
            for idx, text in enumerate(cluster_lines(frags, tolerance=config.line_tolerance)):
                rows.append({"page": page_num, "index": idx, "text": text})
    return rows


def process_document(
    pdf_path: str,
    collection: Optional[OrderCollection] = None,
    config: Optional[ExtractionConfig] = None,
) -> OrderCollection:
    """
    处理整个 PDF，一页一条订单。

    Args:
        pdf_path: PDF 文件路径
        collection: 调用方持有的结果集合（成功时被整体替换）；None 时新建
        config: 抽取配置

    Returns:
        collection

    Raises:
        FileNotFoundError: 文件不存在（集合不变）
        OrderBatchError: 任意一页或文档读取失败
    """
    ensure_file_exists(pdf_path)
    config = config or ExtractionConfig()
    if collection is None:
        collection = OrderCollection()

    staged = OrderCollection()
    try:
        with closing(iter_page_fragments(pdf_path, y_axis=config.y_axis)) as pages:
            for page_num, frags in pages:
                staged.append(process_page(frags, page_num, config))
    except Exception as exc:
        collection.clear()
        logger.error(f"[PIPELINE] Error processing PDF {pdf_path}: {exc}")
        raise OrderBatchError(f"Error processing PDF: {exc}") from exc

    collection.replace(staged)
    logger.info(f"[PIPELINE] Successfully extracted {len(collection)} order(s) from {pdf_path}")
    return collection
