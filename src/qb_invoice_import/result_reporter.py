"""
Result Reporter
Echoes each invoice outcome to the operator as it is processed and writes
the plain-text error log when any invoice failed.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional

from . import import_config as cfg
from .models import ImportResult, InvoiceResult, QbResponse

logger = logging.getLogger(__name__)

SUCCESS_MARK = "✔"
FAILURE_MARK = "✘"


class ResultReporter:
    """Turn QuickBooks responses into operator-facing status lines."""

    def __init__(
        self,
        error_log_path: Optional[str] = None,
        echo: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.error_log_path = error_log_path or cfg.ERROR_LOG_PATH
        self.echo = echo or print

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def report_response(self, invoice_id: str, response: QbResponse) -> InvoiceResult:
        """Build, echo and log the result for one invoice."""
        result = InvoiceResult(
            invoice_id=invoice_id,
            txn_id=response.txn_id,
            status_code=response.status_code,
            status_message=response.status_message,
        )

        if response.success:
            result.status = "SUCCESS"
            result.message = (
                f"{SUCCESS_MARK} Invoice {invoice_id} created: "
                f"TxnID={response.txn_id}"
            )
            logger.info("Invoice %s created: TxnID=%s", invoice_id, response.txn_id)
        else:
            result.status = "FAILED"
            result.message = (
                f"{FAILURE_MARK} Invoice {invoice_id} failed: "
                f"Code={response.status_code} – {response.status_message}"
            )
            logger.error(
                "Invoice %s failed: Code=%s (%s) %s",
                invoice_id,
                response.status_code,
                response.status_severity or "Error",
                response.status_message,
            )

        self.echo(result.message)
        return result

    def finish(self, import_result: ImportResult) -> ImportResult:
        """Write the error log if anything failed and log the run summary."""
        failures = import_result.failure_messages
        if failures:
            import_result.error_log_path = self.write_error_log(failures)
            self.echo(f"Errors logged to {import_result.error_log_path}")

        logger.info(
            "Import finished: %d invoice(s), %d created, %d failed",
            import_result.total_invoices,
            import_result.successful,
            import_result.failed,
        )
        return import_result

    def write_error_log(self, lines: List[str]) -> str:
        """Write *lines* newline-delimited and return the file path."""
        path = Path(self.error_log_path)
        if path.parent != Path("."):
            path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="\n") as fh:
            fh.write("\n".join(lines) + "\n")
        return str(path)
