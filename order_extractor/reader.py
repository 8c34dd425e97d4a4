"""
PDF 文本读取模块

职责：
- 打开 PDF 文件
- 按页提取带基线坐标的文本片段（PositionedFragment）
- 返回原始数据，不做任何业务逻辑处理
"""

import os
import logging
from typing import Iterator, List, Optional, Tuple

import fitz  # PyMuPDF

from .models import PositionedFragment
from .preprocessor import clean_text

logger = logging.getLogger("order_extract")

Y_AXIS_PDF = "pdf"
Y_AXIS_SCREEN = "screen"
Y_AXES = (Y_AXIS_PDF, Y_AXIS_SCREEN)


class PdfReadError(RuntimeError):
    """PDF 无法打开或无法解密"""
    pass


def ensure_file_exists(pdf_path: str) -> None:
    """
    检查文件是否存在。

    Raises:
        FileNotFoundError: 文件不存在
    """
    if not os.path.isfile(pdf_path):
        logger.error("File not found: %s", pdf_path)
        raise FileNotFoundError(pdf_path)


def open_document(pdf_path: str):
    """
    打开 PDF（加密文档尝试空密码）。

    Raises:
        FileNotFoundError: 文件不存在
        PdfReadError: 打开失败或加密
    """
    ensure_file_exists(pdf_path)
    try:
        doc = fitz.open(pdf_path)
    except Exception as e:
        logger.exception("Failed to open PDF")
        raise PdfReadError(f"open_failed: {e!r}") from e

    if doc.is_encrypted and not doc.authenticate(""):
        doc.close()
        raise PdfReadError("encrypted_pdf_not_supported")
    return doc


def extract_fragments_from_page(page, y_axis: str = Y_AXIS_PDF) -> List[PositionedFragment]:
    """
    从页面提取文本片段。

    使用 page.get_text('dict') 的 span 基线原点（origin）作为坐标。

    Args:
        page: PyMuPDF 页面对象
        y_axis: "pdf" 表示 y 轴向上（原点在左下角，与 PDF 用户空间一致），
                "screen" 表示保留 PyMuPDF 的向下 y 轴

    Returns:
        [PositionedFragment(text, x, y), ...]，空白片段被丢弃
    """
    if y_axis not in Y_AXES:
        raise ValueError(f"Unknown y_axis: {y_axis!r}")

    height = float(page.rect.height)
    info = page.get_text("dict")
    out = []
    for blk in info.get("blocks", []):
        if blk.get("type", 0) != 0:
            continue
        for ln in blk.get("lines", []):
            for sp in ln.get("spans", []):
                txt = clean_text(sp.get("text") or "")
                if not txt:
                    continue
                ox, oy = sp.get("origin") or sp["bbox"][:2]
                y = height - float(oy) if y_axis == Y_AXIS_PDF else float(oy)
                out.append(PositionedFragment(txt, round(float(ox), 2), round(y, 2)))
    return out


def iter_page_fragments(
    pdf_path: str,
    pages: Optional[List[int]] = None,
    y_axis: str = Y_AXIS_PDF,
) -> Iterator[Tuple[int, List[PositionedFragment]]]:
    """
    逐页读取文本片段（严格按页顺序，上一页处理完才读取下一页）。

    Args:
        pdf_path: PDF 文件路径
        pages: 指定页码（1-based），None 表示全部
        y_axis: 见 extract_fragments_from_page

    Yields:
        (page_number, fragments)
    """
    doc = open_document(pdf_path)
    try:
        logger.info(f"Opened {pdf_path}: {doc.page_count} page(s)")
        for pno in range(doc.page_count):
            page_num = pno + 1
            if pages and page_num not in pages:
                continue
            page = doc.load_page(pno)
            frags = extract_fragments_from_page(page, y_axis=y_axis)
            logger.debug("Page %d extracted, %d fragment(s)", page_num, len(frags))
            yield page_num, frags
    finally:
        doc.close()


def count_pages(pdf_path: str) -> int:
    doc = open_document(pdf_path)
    try:
        return doc.page_count
    finally:
        doc.close()
