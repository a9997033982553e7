"""
Invoice Import Data Models
Dataclasses and exceptions shared by the loader, session and reporter.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class QbImportError(Exception):
    """Base class for invoice import errors."""


class LoadError(QbImportError):
    """An input file is missing, unreadable, or lacks a required column."""


class QbSessionError(QbImportError):
    """A request processor call failed or was made in the wrong state."""


class QbResponseError(QbImportError):
    """The qbXML response could not be parsed."""


# ---------------------------------------------------------------------------
# Input records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class InvoiceHeader:
    """Header-level invoice data from the header CSV."""
    invoice_id: str
    customer_ref: str
    txn_date: date
    ref_number: str

    # Metadata (not from CSV)
    row_number: int = 0  # 1-based data row in CSV file


@dataclass(frozen=True)
class InvoiceLine:
    """A single line item from the lines CSV.

    ``quantity``, ``rate`` and ``amount`` are None when the cell was empty;
    absent values are never sent to QuickBooks.
    """
    invoice_id: str
    item_ref: str
    line_num: int = 0
    desc: str = ""
    quantity: Optional[Decimal] = None
    rate: Optional[Decimal] = None
    amount: Optional[Decimal] = None

    # Metadata (not from CSV)
    row_number: int = 0


# ---------------------------------------------------------------------------
# Session state
# ---------------------------------------------------------------------------

class SessionState(str, Enum):
    CLOSED = "CLOSED"
    CONNECTED = "CONNECTED"
    IN_SESSION = "IN_SESSION"
    ENDED = "ENDED"


# ---------------------------------------------------------------------------
# QuickBooks response models
# ---------------------------------------------------------------------------

@dataclass
class QbResponse:
    """One parsed response from a qbXML response message set."""
    request_id: str = ""
    status_code: int = 0
    status_severity: str = ""
    status_message: str = ""
    txn_id: str = ""

    @property
    def success(self) -> bool:
        return self.status_code == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "request_id": self.request_id,
            "status_code": self.status_code,
            "status_severity": self.status_severity,
            "status_message": self.status_message,
            "txn_id": self.txn_id,
        }


# ---------------------------------------------------------------------------
# Processing result models
# ---------------------------------------------------------------------------

@dataclass
class InvoiceResult:
    """Result of submitting a single invoice."""
    invoice_id: str = ""
    status: str = "PENDING"  # SUCCESS, FAILED
    txn_id: str = ""
    status_code: int = 0
    status_message: str = ""
    message: str = ""  # line echoed to the operator

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "invoice_id": self.invoice_id,
            "status": self.status,
        }
        if self.txn_id:
            d["txn_id"] = self.txn_id
        if self.status != "SUCCESS":
            d["status_code"] = self.status_code
            d["status_message"] = self.status_message
        return d


@dataclass
class ImportResult:
    """Result of one import run."""
    total_invoices: int = 0
    successful: int = 0
    failed: int = 0
    results: List[InvoiceResult] = field(default_factory=list)
    unanswered_invoices: List[str] = field(default_factory=list)
    error_log_path: str = ""

    @property
    def failure_messages(self) -> List[str]:
        return [r.message for r in self.results if r.status == "FAILED"]

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "summary": {
                "total_invoices": self.total_invoices,
                "successful": self.successful,
                "failed": self.failed,
            },
            "results": [r.to_dict() for r in self.results],
        }
        if self.unanswered_invoices:
            d["unanswered_invoices"] = self.unanswered_invoices
        if self.error_log_path:
            d["error_log_path"] = self.error_log_path
        return d
