"""
CSV Loader Service
Parses the invoice header and line CSV files into InvoiceHeader and
InvoiceLine records, and groups lines under their parent invoice.
"""

from __future__ import annotations

import csv
import io
import logging
import os
from collections import defaultdict
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional, Tuple

from . import import_config as cfg
from .models import InvoiceHeader, InvoiceLine, LoadError

logger = logging.getLogger(__name__)


class CsvLoaderService:
    """Read header/line CSV files, binding fields by column name."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def read_invoice_headers(self, file_path: str) -> List[InvoiceHeader]:
        """Load the header CSV in file order.

        Raises:
            LoadError: file missing/unreadable, a required column absent
                or a TxnDate that matches none of the accepted formats.
        """
        headers: List[InvoiceHeader] = []
        for row_number, row in self._read_rows(
            file_path, cfg.HEADER_REQUIRED_COLUMNS, "Invoice header"
        ):
            txn_date = self._parse_date(row.get("TxnDate", ""))
            if txn_date is None:
                raise LoadError(
                    f"Invoice header file {file_path} row {row_number} "
                    f"(InvoiceID '{row.get('InvoiceID', '')}'): "
                    f"unparsable TxnDate '{row.get('TxnDate', '')}'"
                )
            headers.append(
                InvoiceHeader(
                    invoice_id=row.get("InvoiceID", ""),
                    customer_ref=row.get("CustomerRef", ""),
                    txn_date=txn_date,
                    ref_number=row.get("RefNumber", ""),
                    row_number=row_number,
                )
            )

        logger.info("Loaded %d invoice header(s) from %s", len(headers), file_path)
        return headers

    def read_invoice_lines(self, file_path: str) -> List[InvoiceLine]:
        """Load the lines CSV in file order.

        Empty Quantity/Rate/Amount cells load as None, never zero.
        """
        lines: List[InvoiceLine] = []
        for row_number, row in self._read_rows(
            file_path, cfg.LINE_REQUIRED_COLUMNS, "Invoice lines"
        ):
            lines.append(self._row_to_line(row, row_number))

        logger.info("Loaded %d invoice line(s) from %s", len(lines), file_path)
        return lines

    @staticmethod
    def group_lines(
        headers: List[InvoiceHeader],
        lines: List[InvoiceLine],
    ) -> Tuple[Dict[str, List[InvoiceLine]], List[str]]:
        """Group lines by InvoiceID, keeping line-file order.

        Returns:
            (lines_by_invoice, orphan_invoice_ids) - orphans are InvoiceIDs
            referenced by lines but missing from the headers.
        """
        lines_by_invoice: Dict[str, List[InvoiceLine]] = defaultdict(list)
        for line in lines:
            lines_by_invoice[line.invoice_id].append(line)

        known = {hdr.invoice_id for hdr in headers}
        orphans = [inv_id for inv_id in lines_by_invoice if inv_id not in known]
        return dict(lines_by_invoice), orphans

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _read_rows(self, file_path: str, required_columns: List[str], label: str):
        """Yield (row_number, stripped_row) for every non-empty data row."""
        if not os.path.exists(file_path):
            raise LoadError(f"{label} file not found: {file_path}")

        try:
            raw = self._read_file(file_path)
        except (OSError, UnicodeDecodeError) as exc:
            raise LoadError(f"Cannot read {label} file {file_path}: {exc}") from exc

        reader = csv.DictReader(io.StringIO(raw))
        if reader.fieldnames is None:
            raise LoadError(f"{label} file has no header row: {file_path}")

        # Normalise header names
        reader.fieldnames = [(h or "").strip() for h in reader.fieldnames]

        missing = [c for c in required_columns if c not in reader.fieldnames]
        if missing:
            raise LoadError(
                f"{label} file {file_path} missing required columns: "
                + ", ".join(missing)
            )

        for row_number, raw_row in enumerate(reader, start=1):
            # Short rows give None values, long rows put extras under None
            row = {
                k: (v.strip() if isinstance(v, str) else "")
                for k, v in raw_row.items()
                if k is not None
            }

            # Skip completely empty rows
            if all(v == "" for v in row.values()):
                continue

            yield row_number, row

    def _row_to_line(self, row: Dict[str, str], row_number: int) -> InvoiceLine:
        """Convert a CSV row dict into an InvoiceLine."""
        line_num_raw = row.get("LineNum", "")
        try:
            line_num = int(line_num_raw) if line_num_raw else 0
        except ValueError:
            line_num = 0

        return InvoiceLine(
            invoice_id=row.get("InvoiceID", ""),
            item_ref=row.get("ItemRef", ""),
            line_num=line_num,
            desc=row.get("Desc", ""),
            quantity=self._optional_decimal(row, "Quantity", row_number),
            rate=self._optional_decimal(row, "Rate", row_number),
            amount=self._optional_decimal(row, "Amount", row_number),
            row_number=row_number,
        )

    @staticmethod
    def _optional_decimal(
        row: Dict[str, str], column: str, row_number: int
    ) -> Optional[Decimal]:
        """Empty cell -> None; otherwise the exact Decimal written."""
        value = row.get(column, "")
        if not value:
            return None
        number = None
        # Decimal() also accepts "1_000"; only "," is a digit separator here
        if "_" not in value:
            try:
                number = Decimal(value.replace(",", ""))
            except InvalidOperation:
                number = None
        if number is not None and number.is_finite():
            return number
        logger.warning(
            "Invoice lines row %d: '%s' is not a number in column %s; "
            "treated as empty",
            row_number, value, column,
        )
        return None

    @staticmethod
    def _parse_date(value: str) -> Optional[date]:
        if not value:
            return None
        for fmt in cfg.DATE_FORMATS:
            try:
                return datetime.strptime(value, fmt).date()
            except ValueError:
                continue
        return None

    @staticmethod
    def _read_file(file_path: str) -> str:
        """Read file content, handling BOM."""
        with open(file_path, "r", encoding="utf-8-sig", newline="") as fh:
            return fh.read()
