"""
Invoice Importer
Runs one QuickBooks session: builds an InvoiceAdd request per header,
submits the batch in a single call and pairs each response with its
invoice by position.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from .csv_loader_service import CsvLoaderService
from .models import ImportResult, InvoiceHeader, InvoiceLine, QbResponse
from .qb_session import QbSessionManager
from .qbxml_builder import QbxmlInvoiceBatch
from .result_reporter import ResultReporter

logger = logging.getLogger(__name__)


class InvoiceImporter:
    """Push loaded invoices to QuickBooks and report per-invoice outcomes."""

    def __init__(
        self,
        session_manager: Optional[QbSessionManager] = None,
        reporter: Optional[ResultReporter] = None,
    ) -> None:
        self.session_manager = session_manager or QbSessionManager()
        self.reporter = reporter or ResultReporter()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def push_invoices(
        self,
        headers: List[InvoiceHeader],
        lines: List[InvoiceLine],
    ) -> ImportResult:
        """Create every header's invoice in QuickBooks.

        The session is always ended and the connection closed, even when
        building or submitting the batch raises.
        """
        with self.session_manager.session() as session:
            batch = self.build_batch(session.create_batch(), headers, lines)
            logger.info("Submitting %d invoice request(s)", len(batch))
            responses = session.submit_batch(batch)
            result = self.correlate(batch.invoice_order, responses)
            self.reporter.finish(result)
        return result

    @staticmethod
    def build_batch(
        batch: QbxmlInvoiceBatch,
        headers: List[InvoiceHeader],
        lines: List[InvoiceLine],
    ) -> QbxmlInvoiceBatch:
        """Add one request per header, in header order, with its lines."""
        lines_by_invoice, orphans = CsvLoaderService.group_lines(headers, lines)
        for orphan in orphans:
            logger.warning(
                "Lines for InvoiceID '%s' have no matching header and will "
                "not be submitted",
                orphan,
            )

        for hdr in headers:
            handle = batch.add_invoice_request(hdr)
            for ln in lines_by_invoice.get(hdr.invoice_id, []):
                batch.add_line(handle, ln)
        return batch

    def correlate(
        self,
        invoice_order: List[str],
        responses: List[QbResponse],
    ) -> ImportResult:
        """Pair response i with invoice_order[i] and report each outcome."""
        result = ImportResult(total_invoices=len(invoice_order))

        for idx, resp in enumerate(responses):
            if idx >= len(invoice_order):
                logger.warning(
                    "QuickBooks returned %d response(s) for %d request(s); "
                    "extra responses ignored",
                    len(responses), len(invoice_order),
                )
                break

            if resp.request_id and resp.request_id != str(idx):
                logger.warning(
                    "Response %d carries requestID %s; invoice correlation "
                    "may be wrong",
                    idx, resp.request_id,
                )

            inv_result = self.reporter.report_response(invoice_order[idx], resp)
            result.results.append(inv_result)
            if inv_result.status == "SUCCESS":
                result.successful += 1
            else:
                result.failed += 1

        result.unanswered_invoices = invoice_order[len(responses):]
        if result.unanswered_invoices:
            logger.warning(
                "No QuickBooks response for invoice(s): %s",
                ", ".join(result.unanswered_invoices),
            )
        return result
