"""
命令行接口模块（主入口）

职责：
- 解析命令行参数
- 协调各模块完成任务
- 数据流：reader → preprocessor → extractor → validator → writer / sheets

用法：
    python order_extract.py dump invoice.pdf --out lines.csv
    python order_extract.py extract invoice.pdf --out orders.csv
    python order_extract.py push invoice.pdf --url https://script.google.com/.../exec
"""

import sys
import logging
import argparse

from order_extractor.config import load_config
from order_extractor.models import SCHEMAS
from order_extractor.extractor import QUANTITY_MODES
from order_extractor.pipeline import OrderBatchError, process_document, read_page_lines
from order_extractor.reader import PdfReadError
from order_extractor.sheets import SheetAppender, SheetAppendError
from order_extractor.validator import validate_orders
from order_extractor.writer import append_xlsx, export_rows, print_records, write_auto

logger = logging.getLogger("order_extract")
DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def page_list(value: str) -> list[int]:
    """argparse 类型：把 "1,3" 或 "2-4" 解析为去重排序的页码（1-based）"""
    pages = set()
    try:
        for part in filter(None, (p.strip() for p in value.split(","))):
            start, _, end = part.partition("-")
            pages.update(range(int(start), int(end or start) + 1))
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid page list: {value!r}")
    if not pages or min(pages) < 1:
        raise argparse.ArgumentTypeError(f"invalid page list: {value!r}")
    return sorted(pages)


def setup_parser() -> argparse.ArgumentParser:
    """设置命令行参数解析器"""
    parser = argparse.ArgumentParser(
        description="Home Depot Invoice Order Extractor - PDF invoice to order records",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Subcommands")

    def add_common_args(p):
        """添加通用参数"""
        p.add_argument("pdf", help="PDF file path")
        p.add_argument("--config", default=None, help="Config file path (default: order_config.json)")
        p.add_argument(
            "--config-key",
            default="default",
            help="Template profile name in the config file (default: 'default')"
        )
        p.add_argument("--schema", choices=SCHEMAS, default=None, help="Override record schema")
        p.add_argument("--quantity-mode", choices=QUANTITY_MODES, default=None, help="Override quantity policy")

    dump_parser = subparsers.add_parser("dump", help="Dump clustered lines per page (debug)")
    add_common_args(dump_parser)
    dump_parser.add_argument("--pages", type=page_list, default=None, help="Pages to dump, e.g. '1,3' or '2-4'")
    dump_parser.add_argument("--out", default="", help="Output file path (.csv/.jsonl/.json), stdout if not specified")

    extract_parser = subparsers.add_parser("extract", help="Extract one order per page")
    add_common_args(extract_parser)
    extract_parser.add_argument(
        "--out",
        default="",
        help="Output file path (.csv/.xlsx/.json/.jsonl), stdout if not specified"
    )
    extract_parser.add_argument(
        "--append-xlsx",
        default="",
        help="Append the orders to this workbook's IMPORT sheet"
    )

    push_parser = subparsers.add_parser("push", help="Extract and append orders to the remote sheet")
    add_common_args(push_parser)
    push_parser.add_argument("--url", default="", help="Sheet append URL (default: config sheet_url)")

    return parser


def build_config(args):
    config = load_config(args.config, args.config_key)
    if args.schema:
        config.schema = args.schema
    if args.quantity_mode:
        config.quantity_mode = args.quantity_mode
    return config


def extract_with_review(args, config):
    """执行批处理并输出复核提示"""
    orders = process_document(args.pdf, config=config)
    for warning in validate_orders(orders):
        logger.warning(warning)
    return orders


def run_dump(args) -> None:
    """执行 dump 子命令"""
    config = build_config(args)
    rows = read_page_lines(args.pdf, config=config, pages=args.pages)
    if args.out:
        write_auto(rows, args.out)
        print(f"Wrote {len(rows)} line(s) -> {args.out}")
    else:
        print_records(rows, jsonl=True)


def run_extract(args) -> None:
    """执行 extract 子命令"""
    config = build_config(args)
    orders = extract_with_review(args, config)

    if args.append_xlsx:
        added = append_xlsx(orders, args.append_xlsx)
        print(f"Appended {added} order(s) -> {args.append_xlsx}")

    if args.out:
        if args.out.lower().endswith((".csv", ".xlsx")):
            write_auto(export_rows(orders), args.out)
        else:
            write_auto(orders.to_records(config.schema), args.out)
        print(f"Extracted {len(orders)} order(s) -> {args.out}")
    elif not args.append_xlsx:
        print_records(orders.to_records(config.schema))


def run_push(args) -> None:
    """执行 push 子命令"""
    config = build_config(args)
    orders = extract_with_review(args, config)

    with SheetAppender(args.url or config.sheet_url, timeout=config.sheet_timeout) as appender:
        reply = appender.append(orders)
    print(f"Sent {len(orders)} order(s), rows added: {reply.get('rowsAdded', len(orders))}")


def main():
    """CLI 主入口"""
    parser = setup_parser()
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format=DEFAULT_LOG_FORMAT)

    commands = {"dump": run_dump, "extract": run_extract, "push": run_push}
    if args.command not in commands:
        parser.print_help()
        sys.exit(1)

    try:
        commands[args.command](args)
    except (FileNotFoundError, PdfReadError, OrderBatchError, SheetAppendError, ValueError) as e:
        logger.error(f"{args.command} failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
