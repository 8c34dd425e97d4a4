"""
文本预处理模块

职责：
- 按 y 坐标把页面上零散的文本片段聚类成行（单遍扫描，不回溯）
- 行内按 x 坐标排序后拼接
- 文本清理（空白标准化）
- 不包含业务逻辑，只做通用文本处理
"""

import logging
from typing import Iterable, Iterator, List

from .models import PositionedFragment

logger = logging.getLogger("order_extract")

LINE_TOLERANCE = 5.0


def join_cluster(cluster: List[PositionedFragment]) -> str:
    """行内片段按 x 升序，用单个空格拼接后去掉首尾空白"""
    ordered = sorted(cluster, key=lambda f: f.x)
    return " ".join(f.text for f in ordered).strip()


def cluster_lines(
    fragments: Iterable[PositionedFragment],
    tolerance: float = LINE_TOLERANCE,
) -> Iterator[str]:
    """
    把一页的文本片段聚类成行。

    算法：
        1. 所有片段按 y 升序排序
        2. 单遍扫描：片段与当前簇的第一个片段（锚点）y 差 < tolerance 时加入，
           否则关闭当前簇并以该片段开新簇
        3. 关闭簇时按 x 排序、空格拼接、去首尾空白，产出一行
        4. 扫描结束后关闭最后一个簇

    已关闭的簇不会再打开，即使后续片段落在其锚点容差内。

    Args:
        fragments: PositionedFragment 序列
        tolerance: 行容差（页面坐标单位，默认 5）

    Yields:
        行文本（按簇锚点 y 升序）

    Example:
        [("Doe", 40, 100.0), ("John", 10, 101.5), ("Total", 10, 120.0)]
        → "John Doe", "Total"
    """
    ordered = sorted(fragments, key=lambda f: f.y)

    current: List[PositionedFragment] = []
    for frag in ordered:
        if not current or abs(frag.y - current[0].y) < tolerance:
            current.append(frag)
        else:
            logger.debug(f"[CLUSTER] y={current[0].y:.2f}: {len(current)} fragment(s)")
            yield join_cluster(current)
            current = [frag]

    if current:
        logger.debug(f"[CLUSTER] y={current[0].y:.2f}: {len(current)} fragment(s)")
        yield join_cluster(current)


def clean_text(text: str) -> str:
    """
    清理文本。

    处理：
        1. 不换行空格替换为普通空格
        2. 连续空白压缩为一个空格
        3. 去掉首尾空白

    Example:
        "Ship To:\\u00a0 John   Doe " → "Ship To: John Doe"
    """
    text = text.replace("\u00a0", " ")
    return " ".join(text.split())
