"""Receipt ingestion services package."""

from expense_ai.services.ocr.receipt_scanner import (
    RECEIPT_CATALOG,
    CatalogEntry,
    ReceiptIngestionError,
    ReceiptScannerInterface,
    ReceiptTooLargeError,
    SimulatedReceiptScanner,
    UnreadableReceiptError,
    UnsupportedReceiptError,
)

__all__ = [
    "RECEIPT_CATALOG",
    "CatalogEntry",
    "ReceiptIngestionError",
    "ReceiptScannerInterface",
    "ReceiptTooLargeError",
    "SimulatedReceiptScanner",
    "UnreadableReceiptError",
    "UnsupportedReceiptError",
]
