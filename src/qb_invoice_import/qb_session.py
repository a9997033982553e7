"""
QuickBooks Session Manager
Owns the connection and session to QuickBooks Desktop's qbXML request
processor (COM, through pywin32) and submits request batches.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional

from . import import_config as cfg
from .models import QbResponse, QbSessionError, SessionState
from .qb_response_parser import QbResponseParser
from .qbxml_builder import QbxmlInvoiceBatch

logger = logging.getLogger(__name__)


class QbSessionManager:
    """Connection/session lifecycle for the qbXML request processor.

    CLOSED -> CONNECTED -> IN_SESSION -> ENDED -> CLOSED
    """

    def __init__(
        self,
        app_id: Optional[str] = None,
        app_name: Optional[str] = None,
        company_file: Optional[str] = None,
        qbxml_version: Optional[str] = None,
        processor: Any = None,
    ) -> None:
        self.app_id = cfg.QB_APP_ID if app_id is None else app_id
        self.app_name = app_name or cfg.QB_APP_NAME
        self.company_file = cfg.QB_COMPANY_FILE if company_file is None else company_file
        self.qbxml_version = qbxml_version or cfg.QBXML_VERSION
        self.parser = QbResponseParser()

        self._processor = processor
        self._ticket: Optional[str] = None
        self.state = SessionState.CLOSED

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open_connection(self) -> None:
        self._require(SessionState.CLOSED, "open connection")
        if self._processor is None:
            self._processor = self._create_processor()
        self._call(
            "OpenConnection2",
            self.app_id,
            self.app_name,
            cfg.QB_CONNECTION_LOCAL_QBD,
        )
        self.state = SessionState.CONNECTED
        logger.info("Connected to QuickBooks as '%s'", self.app_name)

    def begin_session(self) -> None:
        self._require(SessionState.CONNECTED, "begin session")
        self._ticket = self._call(
            "BeginSession",
            self.company_file,
            cfg.QB_OPEN_MODE_DO_NOT_CARE,
        )
        self.state = SessionState.IN_SESSION
        logger.info(
            "QuickBooks session started (company file: %s)",
            self.company_file or "<currently open>",
        )

    def end_session(self) -> None:
        self._require(SessionState.IN_SESSION, "end session")
        try:
            self._call("EndSession", self._ticket)
        finally:
            self._ticket = None
            self.state = SessionState.ENDED
        logger.info("QuickBooks session ended")

    def close_connection(self) -> None:
        if self.state not in (SessionState.CONNECTED, SessionState.ENDED):
            raise QbSessionError(
                f"Cannot close connection while {self.state.value}"
            )
        try:
            self._call("CloseConnection")
        finally:
            self.state = SessionState.CLOSED
        logger.info("QuickBooks connection closed")

    @contextmanager
    def session(self) -> Iterator["QbSessionManager"]:
        """Open connection and session; always end then close on exit."""
        self.open_connection()
        try:
            self.begin_session()
            try:
                yield self
            finally:
                self.end_session()
        finally:
            self.close_connection()

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def create_batch(self) -> QbxmlInvoiceBatch:
        """Return an empty continue-on-error request batch."""
        return QbxmlInvoiceBatch(qbxml_version=self.qbxml_version)

    def submit_batch(self, batch: QbxmlInvoiceBatch) -> List[QbResponse]:
        """Send the whole batch in one call; responses are in request order."""
        raw_response = self.process_request(batch.to_xml())
        return self.parser.parse_batch_response(raw_response)

    def process_request(self, xml_data: str) -> str:
        self._require(SessionState.IN_SESSION, "process request")
        logger.debug("Sending qbXML request (%d bytes)", len(xml_data))
        return self._call("ProcessRequest", self._ticket, xml_data)

    # ------------------------------------------------------------------
    # Internal COM
    # ------------------------------------------------------------------

    def _require(self, expected: SessionState, action: str) -> None:
        if self.state != expected:
            raise QbSessionError(
                f"Cannot {action} while {self.state.value} "
                f"(expected {expected.value})"
            )

    def _call(self, method: str, *args: Any) -> Any:
        """Invoke a request processor method.

        Raises QbSessionError on any COM failure.
        """
        try:
            return getattr(self._processor, method)(*args)
        except Exception as exc:
            raise QbSessionError(
                f"QuickBooks {method} failed: {exc}"
            ) from exc

    @staticmethod
    def _create_processor() -> Any:
        """Dispatch the QuickBooks request processor COM object."""
        try:
            import win32com.client
        except ImportError as exc:
            raise QbSessionError(
                "pywin32 is required to talk to QuickBooks Desktop "
                "(Windows only)"
            ) from exc

        try:
            return win32com.client.Dispatch(cfg.QB_PROG_ID)
        except Exception as exc:
            raise QbSessionError(
                f"Cannot create {cfg.QB_PROG_ID}: is the QuickBooks SDK "
                f"installed? ({exc})"
            ) from exc
