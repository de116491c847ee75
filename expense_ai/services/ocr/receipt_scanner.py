"""
Receipt Ingestion

Turns an uploaded receipt file into an Expense.

The only implementation shipped here is SimulatedReceiptScanner: it
checks that the upload is a plausible receipt file, waits a few seconds
to stand in for processing latency and then returns a record drawn from
a fixed catalog. Image uploads are decoded once to reject corrupt
files; nothing is extracted from them. A real extraction pipeline
plugs in behind ReceiptScannerInterface without touching the ledger
or the analytics.

Contract for every scanner:
- input: file name and raw bytes
- output: one well-formed OCR-sourced Expense
- failure: a ReceiptIngestionError subclass, never a partial record
"""

import asyncio
import random
from abc import ABC, abstractmethod
from decimal import Decimal
from io import BytesIO
from typing import Awaitable, Callable, NamedTuple, Optional, Sequence

import structlog
from PIL import Image

from expense_ai.config import get_settings
from expense_ai.models.expense import (
    Expense,
    ExpenseCategory,
    ExpenseSource,
    ReceiptUpload,
)


logger = structlog.get_logger(__name__)

# Uploads with these extensions must decode as images; PDFs are taken as-is
IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "webp", "gif"})


class ReceiptIngestionError(Exception):
    """Base exception for receipt ingestion errors."""

    def __init__(self, filename: str, message: str):
        self.filename = filename
        super().__init__(message)


class UnsupportedReceiptError(ReceiptIngestionError):
    """File type is not an accepted receipt format."""
    pass


class UnreadableReceiptError(ReceiptIngestionError):
    """File is empty or could not be read."""
    pass


class ReceiptTooLargeError(ReceiptIngestionError):
    """File exceeds the configured upload size."""
    pass


class CatalogEntry(NamedTuple):
    amount: Decimal
    category: ExpenseCategory
    description: str
    merchant: str


RECEIPT_CATALOG: tuple[CatalogEntry, ...] = (
    CatalogEntry(Decimal("45.67"), ExpenseCategory.FOOD, "Restaurant dinner", "Olive Garden"),
    CatalogEntry(Decimal("12.99"), ExpenseCategory.FOOD, "Coffee and pastry", "Starbucks"),
    CatalogEntry(Decimal("89.45"), ExpenseCategory.SHOPPING, "Grocery shopping", "Whole Foods"),
    CatalogEntry(Decimal("25.00"), ExpenseCategory.TRANSPORT, "Gas station", "Shell"),
    CatalogEntry(Decimal("15.50"), ExpenseCategory.ENTERTAINMENT, "Movie tickets", "AMC Theaters"),
    CatalogEntry(Decimal("67.89"), ExpenseCategory.UTILITIES, "Electric bill", "ConEd"),
    CatalogEntry(Decimal("120.00"), ExpenseCategory.HEALTHCARE, "Pharmacy", "CVS"),
)


class ReceiptScannerInterface(ABC):
    """Single-method contract between uploads and the expense ledger."""

    @abstractmethod
    async def ingest(self, filename: str, content: bytes) -> Expense:
        """
        Convert an uploaded receipt into an expense.

        Args:
            filename: Original file name
            content: Raw file bytes

        Returns:
            A new OCR-sourced Expense (not yet stored)

        Raises:
            ReceiptIngestionError: If the file cannot be turned into an expense
        """
        pass


class SimulatedReceiptScanner(ReceiptScannerInterface):
    """
    Stand-in for an OCR pipeline.

    IMPORTANT: the returned expense is random. Amount, category,
    description and merchant come from RECEIPT_CATALOG; confidence is
    drawn uniformly from the configured range.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        catalog: Sequence[CatalogEntry] = RECEIPT_CATALOG,
        min_delay_seconds: Optional[float] = None,
        max_delay_seconds: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        settings = get_settings().receipts
        if not catalog:
            raise ValueError("Receipt catalog cannot be empty")

        self._rng = rng or random.Random()
        self._catalog = tuple(catalog)
        self._min_delay = settings.min_delay_seconds if min_delay_seconds is None else min_delay_seconds
        self._max_delay = settings.max_delay_seconds if max_delay_seconds is None else max_delay_seconds
        self._min_confidence = settings.min_confidence
        self._max_confidence = settings.max_confidence
        self._supported_formats = settings.supported_formats_list
        self._max_size_bytes = settings.max_upload_size_bytes
        self._sleep = sleep

        if self._max_delay < self._min_delay:
            raise ValueError("max_delay_seconds cannot be below min_delay_seconds")

    def check_upload(self, upload: ReceiptUpload) -> None:
        """
        Reject uploads that cannot be receipts.

        Raises:
            UnsupportedReceiptError: Unknown file extension
            UnreadableReceiptError: Empty file
            ReceiptTooLargeError: File over the size limit
        """
        if upload.extension not in self._supported_formats:
            allowed = ", ".join(self._supported_formats)
            raise UnsupportedReceiptError(
                upload.filename,
                f"Unsupported file type '{upload.extension or 'none'}'. "
                f"Please upload one of: {allowed}.",
            )

        if upload.size_bytes == 0:
            raise UnreadableReceiptError(
                upload.filename,
                "The uploaded file is empty. Please choose the receipt file again.",
            )

        if upload.size_bytes > self._max_size_bytes:
            raise ReceiptTooLargeError(
                upload.filename,
                f"The file is larger than {self._max_size_bytes // (1024 * 1024)} MB.",
            )

    def check_image(self, upload: ReceiptUpload, content: bytes) -> None:
        """
        Make sure an image upload actually decodes, using PIL.

        Raises:
            UnreadableReceiptError: Corrupt or truncated image data
        """
        if upload.extension not in IMAGE_EXTENSIONS:
            return

        try:
            with Image.open(BytesIO(content)) as img:
                img.verify()
        except (OSError, SyntaxError, ValueError) as e:
            logger.info("receipt_image_unreadable", filename=upload.filename, error=str(e))
            raise UnreadableReceiptError(
                upload.filename,
                "The uploaded image could not be read. Please upload a clear photo of the receipt.",
            ) from e

    async def ingest(self, filename: str, content: bytes) -> Expense:
        if not filename or not filename.strip():
            raise UnreadableReceiptError(filename or "", "The uploaded file has no name.")
        if content is None:
            raise UnreadableReceiptError(filename, "The uploaded file could not be read.")

        upload = ReceiptUpload(filename=filename.strip(), size_bytes=len(content))
        self.check_upload(upload)
        self.check_image(upload, content)

        delay = self._rng.uniform(self._min_delay, self._max_delay)
        logger.debug("receipt_scan_started", filename=upload.filename, delay_seconds=round(delay, 2))
        await self._sleep(delay)

        entry = self._rng.choice(self._catalog)
        confidence = self._rng.uniform(self._min_confidence, self._max_confidence)

        return Expense(
            amount=entry.amount,
            category=entry.category,
            description=entry.description,
            merchant=entry.merchant,
            source=ExpenseSource.OCR,
            confidence=confidence,
        )
