"""
Tests for the formatting, numbering and video helpers.
"""

from datetime import date
from decimal import Decimal

import pytest

from models.donations import Donation
from utils.document_numbers import generate_document_number, generate_slug, DONATION_PREFIX
from utils.formatting import format_indian_currency, amount_to_words, rupees_in_words, gst_amounts, to_money
from utils.video_embed import detect_video_type, get_video_embed_url, get_video_embed_url_with_autoplay, format_duration
from tests.conftest import TENANT_ID, OTHER_TENANT_ID


class TestFormatting:

    @pytest.mark.parametrize("amount,expected", [
        (Decimal("1234567.891"), "₹ 12,34,567.89"),
        (500, "₹ 500.00"),
        (Decimal("-1500"), "₹ -1,500.00"),
        (None, "₹ 0.00"),
    ])
    def test_indian_currency(self, amount, expected):
        assert format_indian_currency(amount) == expected

    def test_amount_to_words(self):
        assert amount_to_words(1001) == "One Thousand One"
        assert amount_to_words(Decimal("125000.50")) == "One Lakh Twenty Five Thousand and Fifty Paise"
        assert amount_to_words(Decimal("23000000")) == "Two Crore Thirty Lakh"
        assert amount_to_words(0) == "Zero"

    def test_receipt_wording(self):
        assert rupees_in_words(501) == "Rupees Five Hundred One Only"

    def test_gst_amounts(self):
        assert gst_amounts("1000", 18) == (Decimal("180.00"), Decimal("1180.00"))
        assert gst_amounts("99.99", None) == (Decimal("0.00"), Decimal("99.99"))

    def test_to_money_rounds_half_up(self):
        assert to_money("2.345") == Decimal("2.35")


class TestDocumentNumbers:

    def test_sequence_is_per_tenant_and_year(self, db):
        def add(tenant_id, number):
            db.add(Donation(tenant_id=tenant_id, receipt_number=number, amount=1, donation_date=date(2025, 1, 1),
                            payment_mode="Cash", donor_name="x", is_80g_eligible=False, is_posted=False))
            db.flush()

        add(TENANT_ID, "DON-2025-0007")
        add(OTHER_TENANT_ID, "DON-2025-0042")
        assert generate_document_number(db, Donation.receipt_number, TENANT_ID, DONATION_PREFIX, date(2025, 6, 1)) == "DON-2025-0008"
        assert generate_document_number(db, Donation.receipt_number, TENANT_ID, DONATION_PREFIX, date(2026, 4, 1)) == "DON-2026-0001"

    @pytest.mark.parametrize("name,slug", [
        ("Ganesh Chaturthi 2025", "ganesh-chaturthi-2025"),
        ("  Navaratri -- Day 1!  ", "navaratri-day-1"),
        ("Śivarātri", "ivartri"),
    ])
    def test_slug(self, name, slug):
        assert generate_slug(name) == slug


class TestVideoEmbed:

    @pytest.mark.parametrize("url,video_type", [
        ("https://vimeo.com/76979871", "vimeo"),
        ("https://www.loom.com/share/abc123", "loom"),
        ("https://youtu.be/dQw4w9WgXcQ", "youtube"),
        ("https://cdn.example.org/lesson.mp4", "custom"),
        ("", "custom"),
    ])
    def test_detect(self, url, video_type):
        assert detect_video_type(url) == video_type

    def test_embed_urls(self):
        assert get_video_embed_url("https://www.loom.com/share/abc123", "loom") == "https://www.loom.com/embed/abc123"
        assert get_video_embed_url("https://www.youtube.com/watch?v=dQw4w9WgXcQ", "youtube") == \
            "https://www.youtube.com/embed/dQw4w9WgXcQ"
        assert get_video_embed_url("https://cdn.example.org/lesson.mp4", "custom") == "https://cdn.example.org/lesson.mp4"

    def test_autoplay(self):
        assert get_video_embed_url_with_autoplay("https://youtu.be/dQw4w9WgXcQ", "youtube").endswith("?autoplay=1")
        assert get_video_embed_url_with_autoplay("https://vimeo.com/1", "vimeo").endswith("&autoplay=1")
        assert get_video_embed_url_with_autoplay("https://www.loom.com/share/abc", "loom") == "https://www.loom.com/embed/abc"

    @pytest.mark.parametrize("seconds,display", [(None, "0m"), (59, "0m"), (600, "10m"), (3900, "1h 5m")])
    def test_duration(self, seconds, display):
        assert format_duration(seconds) == display
