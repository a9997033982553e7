"""
qbXML Invoice Builder
Builds one qbXML message set holding an InvoiceAddRq per invoice header,
with the header's lines nested as InvoiceLineAdd elements.

All XML is built using xml.etree.ElementTree for proper escaping.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from decimal import Decimal
from typing import List, Optional

from . import import_config as cfg
from .models import InvoiceHeader, InvoiceLine


class QbxmlInvoiceBatch:
    """Accumulate InvoiceAdd requests for a single request-processor call.

    ``invoice_order[i]`` is the InvoiceID of the i-th request; QuickBooks
    answers in request order, so it is also the InvoiceID of the i-th
    response.
    """

    def __init__(
        self,
        qbxml_version: Optional[str] = None,
        on_error: Optional[str] = None,
        percent_item_ref: Optional[str] = None,
    ) -> None:
        self.qbxml_version = qbxml_version or cfg.QBXML_VERSION
        self.percent_item_ref = percent_item_ref or cfg.PERCENT_ITEM_REF

        self._root = ET.Element("QBXML")
        self._msgs = ET.SubElement(self._root, "QBXMLMsgsRq")
        self._msgs.set("onError", on_error or cfg.QB_ON_ERROR)

        self.invoice_order: List[str] = []

    def __len__(self) -> int:
        return len(self.invoice_order)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def add_invoice_request(self, header: InvoiceHeader) -> ET.Element:
        """Append an InvoiceAddRq for *header* and return its InvoiceAdd handle."""
        request = ET.SubElement(self._msgs, "InvoiceAddRq")
        request.set("requestID", str(len(self.invoice_order)))
        self.invoice_order.append(header.invoice_id)

        invoice_add = ET.SubElement(request, "InvoiceAdd")
        self._add_ref(invoice_add, "CustomerRef", header.customer_ref)
        ET.SubElement(invoice_add, "TxnDate").text = header.txn_date.isoformat()
        ET.SubElement(invoice_add, "RefNumber").text = header.ref_number
        return invoice_add

    def add_line(self, handle: ET.Element, line: InvoiceLine) -> ET.Element:
        """Append an InvoiceLineAdd for *line* to the request *handle*.

        Desc is sent only when non-blank. Quantity and Rate are sent only
        when present; the percent item never sends Quantity and sends its
        Rate as RatePercent. Amount is never sent.
        """
        line_add = ET.SubElement(handle, "InvoiceLineAdd")
        self._add_ref(line_add, "ItemRef", line.item_ref)

        if line.desc and line.desc.strip():
            ET.SubElement(line_add, "Desc").text = line.desc

        is_percent = self.is_percent_item(line)

        if line.quantity is not None and not is_percent:
            ET.SubElement(line_add, "Quantity").text = self._number(line.quantity)

        if line.rate is not None:
            # PERCENTTYPE is written as "5" for 5%, not 0.05
            tag = "RatePercent" if is_percent else "Rate"
            ET.SubElement(line_add, tag).text = self._number(line.rate)

        return line_add

    def is_percent_item(self, line: InvoiceLine) -> bool:
        return line.item_ref.casefold() == self.percent_item_ref.casefold()

    def to_xml(self) -> str:
        """Serialize the message set as a qbXML request document."""
        raw = ET.tostring(self._root, encoding="unicode", xml_declaration=False)
        return (
            '<?xml version="1.0" encoding="utf-8"?>\n'
            f'<?qbxml version="{self.qbxml_version}"?>\n'
            + raw
        )

    # ------------------------------------------------------------------
    # Utilities
    # ------------------------------------------------------------------

    @staticmethod
    def _add_ref(parent: ET.Element, tag: str, full_name: str) -> ET.Element:
        ref = ET.SubElement(parent, tag)
        ET.SubElement(ref, "FullName").text = full_name
        return ref

    @staticmethod
    def _number(value: Decimal) -> str:
        """Plain (non-exponent) text of the exact decoded value."""
        return format(value, "f")
