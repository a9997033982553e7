"""
Invoice Import Configuration
Loads environment variables (and a local .env file, if present) and
provides defaults matching the importer's fixed file names.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# ---------------------------------------------------------------------------
# .env in the working directory (operator machine, local only)
# ---------------------------------------------------------------------------
env_file = Path.cwd() / ".env"
if env_file.exists():
    load_dotenv(env_file)

# ---------------------------------------------------------------------------
# Input / output files
# ---------------------------------------------------------------------------
HEADER_CSV_PATH: str = os.getenv("QB_IMPORT_HEADER_CSV", "InvoiceHeader.csv")
LINES_CSV_PATH: str = os.getenv("QB_IMPORT_LINES_CSV", "InvoiceLines.csv")
ERROR_LOG_PATH: str = os.getenv("QB_IMPORT_ERROR_LOG", "InvoiceImportErrors.log")

# ---------------------------------------------------------------------------
# QuickBooks connection
# ---------------------------------------------------------------------------
QB_PROG_ID: str = "QBXMLRP2.RequestProcessor"
QB_APP_ID: str = os.getenv("QB_APP_ID", "")
QB_APP_NAME: str = os.getenv("QB_APP_NAME", "InvoiceImporter")
QB_COMPANY_FILE: str = os.getenv("QB_COMPANY_FILE", "")  # "" = currently open
QBXML_VERSION: str = os.getenv("QB_QBXML_VERSION", "16.0")

# QBXMLRPConnectionType / QBFileMode values from the request processor
QB_CONNECTION_LOCAL_QBD: int = 1
QB_OPEN_MODE_DO_NOT_CARE: int = 2

# Continue processing the remaining requests when one of them fails
QB_ON_ERROR: str = "continueOnError"

# ---------------------------------------------------------------------------
# Mapping rules
# ---------------------------------------------------------------------------
PERCENT_ITEM_REF: str = os.getenv("QB_PERCENT_ITEM_REF", "OOP")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_DIR: str = os.getenv("QB_IMPORT_LOG_DIR", "logs")
LOG_LEVEL: str = os.getenv("QB_IMPORT_LOG_LEVEL", "INFO").upper()
LOG_MAX_MB: int = int(os.getenv("QB_IMPORT_LOG_MAX_MB", "10"))
LOG_BACKUP_COUNT: int = int(os.getenv("QB_IMPORT_LOG_BACKUP_COUNT", "5"))

# ---------------------------------------------------------------------------
# Console
# ---------------------------------------------------------------------------
PAUSE_ON_EXIT: bool = os.getenv("QB_IMPORT_PAUSE_ON_EXIT", "true").lower() == "true"

# ---------------------------------------------------------------------------
# CSV columns
# ---------------------------------------------------------------------------
HEADER_REQUIRED_COLUMNS = [
    "InvoiceID",
    "CustomerRef",
    "TxnDate",
    "RefNumber",
]

LINE_REQUIRED_COLUMNS = [
    "InvoiceID",
    "ItemRef",
]

LINE_OPTIONAL_COLUMNS = [
    "LineNum",
    "Desc",
    "Quantity",
    "Rate",
    "Amount",
]

# Accepted TxnDate formats, tried in order
DATE_FORMATS = [
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%Y-%m-%d %H:%M:%S",
    "%m/%d/%Y %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
]
