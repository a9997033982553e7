"""
Invoice Import entry point
Load both CSV files, push the invoices to QuickBooks, report, then wait
for the operator.
"""

from __future__ import annotations

import io
import logging
import sys
import traceback
from typing import Optional

from . import import_config as cfg
from .csv_loader_service import CsvLoaderService
from .import_logger import get_logger
from .invoice_importer import InvoiceImporter
from .models import ImportResult

logger = logging.getLogger(__name__)


def run_import(
    header_path: Optional[str] = None,
    lines_path: Optional[str] = None,
    importer: Optional[InvoiceImporter] = None,
) -> ImportResult:
    """Load the CSV pair and submit it; load errors abort before QuickBooks."""
    loader = CsvLoaderService()
    headers = loader.read_invoice_headers(header_path or cfg.HEADER_CSV_PATH)
    lines = loader.read_invoice_lines(lines_path or cfg.LINES_CSV_PATH)
    return (importer or InvoiceImporter()).push_invoices(headers, lines)


def ensure_utf8_console() -> None:
    """Rewrap stdout/stderr as UTF-8 so the ✔/✘ status marks survive
    a cp1252 console or a redirected log file."""
    for name in ("stdout", "stderr"):
        stream = getattr(sys, name)
        encoding = (getattr(stream, "encoding", None) or "").lower()
        if encoding.replace("-", "") == "utf8" or not hasattr(stream, "buffer"):
            continue
        stream.flush()
        setattr(
            sys, name,
            io.TextIOWrapper(stream.buffer, encoding="utf-8", errors="replace"),
        )


def main() -> int:
    ensure_utf8_console()
    get_logger()
    exit_code = 0
    try:
        run_import()
    except Exception as exc:
        exit_code = 1
        details = traceback.format_exc()
        logger.error("Import aborted: %s", exc)
        logger.debug("Traceback:\n%s", details)
        print("Unhandled exception:")
        print(details)
    finally:
        print()
        if cfg.PAUSE_ON_EXIT:
            print("Execution complete. Press Enter to exit...")
            try:
                input()
            except EOFError:
                pass
        else:
            print("Execution complete.")
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
