"""
qbXML Response Parser
Parse the request processor's qbXML reply into QbResponse objects, one per
request, in the order QuickBooks returned them.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import List

from .models import QbResponse, QbResponseError


class QbResponseParser:
    """Parse qbXML response message sets."""

    def parse_batch_response(self, raw_xml: str) -> List[QbResponse]:
        """Parse every *Rs element under QBXMLMsgsRs.

        Args:
            raw_xml: Raw qbXML string returned by ProcessRequest.

        Returns:
            Ordered list of QbResponse, document order.

        Raises:
            QbResponseError: empty or malformed response.
        """
        if not raw_xml or not raw_xml.strip():
            raise QbResponseError("Empty response from QuickBooks")

        try:
            root = ET.fromstring(raw_xml.strip())
        except ET.ParseError as exc:
            raise QbResponseError(f"Malformed qbXML response: {exc}") from exc

        msgs = root if root.tag == "QBXMLMsgsRs" else root.find(".//QBXMLMsgsRs")
        if msgs is None:
            raise QbResponseError("No QBXMLMsgsRs element found in QuickBooks reply")

        return [self._parse_response(el) for el in msgs if el.tag.endswith("Rs")]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _parse_response(self, el: ET.Element) -> QbResponse:
        resp = QbResponse(
            request_id=el.get("requestID", ""),
            status_code=self._int_attr(el, "statusCode"),
            status_severity=el.get("statusSeverity", ""),
            status_message=el.get("statusMessage", ""),
        )
        resp.txn_id = self._text(el, "./InvoiceRet/TxnID")
        return resp

    @staticmethod
    def _text(parent: ET.Element, path: str) -> str:
        el = parent.find(path)
        if el is not None and el.text:
            return el.text.strip()
        return ""

    @staticmethod
    def _int_attr(el: ET.Element, name: str) -> int:
        value = el.get(name)
        if value is None:
            raise QbResponseError(f"{el.tag} has no {name} attribute")
        try:
            return int(value.strip())
        except ValueError as exc:
            raise QbResponseError(
                f"{el.tag} has a non-numeric {name}: {value!r}"
            ) from exc
