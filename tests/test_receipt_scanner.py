"""Tests for simulated receipt ingestion."""

import asyncio
import random

import pytest

from expense_ai.models.expense import ExpenseSource, ReceiptUpload
from expense_ai.services.ocr import (
    RECEIPT_CATALOG,
    ReceiptIngestionError,
    ReceiptTooLargeError,
    SimulatedReceiptScanner,
    UnreadableReceiptError,
    UnsupportedReceiptError,
)


class RecordingSleep:
    """Async sleep stand-in that records requested delays."""

    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


def make_scanner(seed=7, sleep=None, **kwargs):
    return SimulatedReceiptScanner(
        rng=random.Random(seed),
        sleep=sleep or RecordingSleep(),
        **kwargs,
    )


class TestSimulatedReceiptScanner:
    """Tests for SimulatedReceiptScanner.ingest."""

    def test_returns_catalog_expense(self, receipt_png):
        """Test that the result is a well-formed scanned expense from the catalog."""
        expense = asyncio.run(make_scanner().ingest("receipt.jpg", receipt_png))

        assert expense.source == ExpenseSource.OCR
        assert expense.is_scanned is True
        assert (expense.amount, expense.category, expense.description, expense.merchant) in [
            tuple(entry) for entry in RECEIPT_CATALOG
        ]
        assert 0.95 <= expense.confidence <= 1.0

    def test_seeded_scanners_agree(self, receipt_png):
        """Test that the same seed gives the same extraction."""
        first = asyncio.run(make_scanner(seed=3).ingest("a.png", receipt_png))
        second = asyncio.run(make_scanner(seed=3).ingest("a.png", receipt_png))
        assert (first.amount, first.merchant, first.confidence) == (
            second.amount, second.merchant, second.confidence,
        )

    def test_each_scan_gets_new_id(self, receipt_png):
        """Test that repeated scans produce distinct expenses."""
        scanner = make_scanner()
        first = asyncio.run(scanner.ingest("a.png", receipt_png))
        second = asyncio.run(scanner.ingest("b.png", receipt_png))
        assert first.id != second.id

    def test_delay_within_configured_range(self):
        """Test that the simulated latency is awaited once within bounds."""
        sleep = RecordingSleep()
        asyncio.run(make_scanner(sleep=sleep).ingest("receipt.pdf", b"%PDF-1.4"))
        assert len(sleep.calls) == 1
        assert 2.0 <= sleep.calls[0] <= 4.0

    def test_custom_delay_range(self):
        """Test explicit delay bounds."""
        sleep = RecordingSleep()
        scanner = make_scanner(sleep=sleep, min_delay_seconds=0, max_delay_seconds=0)
        asyncio.run(scanner.ingest("receipt.pdf", b"%PDF-1.4"))
        assert sleep.calls == [0]

    def test_inverted_delay_range_rejected(self):
        """Test that max below min is a configuration error."""
        with pytest.raises(ValueError):
            make_scanner(min_delay_seconds=3, max_delay_seconds=1)

    def test_empty_catalog_rejected(self):
        """Test that a scanner needs something to return."""
        with pytest.raises(ValueError):
            make_scanner(catalog=())

    def test_unsupported_type(self):
        """Test that non-receipt files are rejected before any delay."""
        sleep = RecordingSleep()
        with pytest.raises(UnsupportedReceiptError) as exc_info:
            asyncio.run(make_scanner(sleep=sleep).ingest("notes.txt", b"hello"))
        assert exc_info.value.filename == "notes.txt"
        assert sleep.calls == []

    def test_extension_is_case_insensitive(self, receipt_png):
        """Test upper-case extensions are accepted."""
        expense = asyncio.run(make_scanner().ingest("SCAN.JPEG", receipt_png))
        assert expense.source == ExpenseSource.OCR

    def test_empty_file(self):
        """Test that empty uploads are unreadable."""
        with pytest.raises(UnreadableReceiptError):
            asyncio.run(make_scanner().ingest("receipt.jpg", b""))

    def test_corrupt_image(self, receipt_png):
        """Test that image bytes that do not decode are rejected before any delay."""
        sleep = RecordingSleep()
        with pytest.raises(UnreadableReceiptError):
            asyncio.run(make_scanner(sleep=sleep).ingest("receipt.png", b"\xff\xd8not-really-a-jpeg"))
        with pytest.raises(UnreadableReceiptError):
            asyncio.run(make_scanner(sleep=sleep).ingest("receipt.png", receipt_png[:20]))
        assert sleep.calls == []

    def test_pdf_is_not_decoded(self):
        """Test that PDF uploads skip the image check."""
        expense = asyncio.run(make_scanner().ingest("statement.pdf", b"%PDF-1.4 minimal"))
        assert expense.source == ExpenseSource.OCR

    def test_missing_content_or_name(self):
        """Test that unreadable uploads fail cleanly."""
        with pytest.raises(UnreadableReceiptError):
            asyncio.run(make_scanner().ingest("receipt.jpg", None))
        with pytest.raises(UnreadableReceiptError):
            asyncio.run(make_scanner().ingest("   ", b"%PDF-1.4"))

    def test_too_large(self):
        """Test that files over the upload limit are rejected."""
        scanner = make_scanner()
        upload = ReceiptUpload(filename="huge.png", size_bytes=10 * 1024 * 1024 + 1)
        with pytest.raises(ReceiptTooLargeError):
            scanner.check_upload(upload)

    def test_errors_share_base_class(self):
        """Test that every ingestion failure is a ReceiptIngestionError."""
        for error_class in (UnsupportedReceiptError, UnreadableReceiptError, ReceiptTooLargeError):
            assert issubclass(error_class, ReceiptIngestionError)
