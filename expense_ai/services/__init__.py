"""Services package."""

from expense_ai.services.ocr import (
    ReceiptIngestionError,
    ReceiptScannerInterface,
    ReceiptTooLargeError,
    SimulatedReceiptScanner,
    UnreadableReceiptError,
    UnsupportedReceiptError,
)
from expense_ai.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    KeyValueStorageInterface,
    StorageError,
    StorageReadError,
    StorageWriteError,
)

__all__ = [
    # Receipt ingestion
    "ReceiptIngestionError",
    "ReceiptScannerInterface",
    "ReceiptTooLargeError",
    "SimulatedReceiptScanner",
    "UnreadableReceiptError",
    "UnsupportedReceiptError",
    # Storage services
    "InMemoryStorage",
    "JsonFileStorage",
    "KeyValueStorageInterface",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
]
