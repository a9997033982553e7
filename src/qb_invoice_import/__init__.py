"""
QuickBooks Invoice Import
Reads invoice header and line CSV files and creates the invoices in
QuickBooks Desktop through the qbXML request processor.
"""

__version__ = "0.1.0"
