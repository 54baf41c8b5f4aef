# -*- coding: utf-8 -*-
"""
tests/shared/utils/test_datetime_helpers.py

Normalización de timestamps a UTC.
"""

from datetime import datetime, timedelta, timezone

from pylinks.shared.utils import ensure_utc, to_iso8601, utcnow


class TestDatetimeHelpers:
    def test_utcnow_is_aware(self):
        assert utcnow().tzinfo is timezone.utc

    def test_naive_is_read_as_utc(self):
        assert ensure_utc(datetime(2026, 10, 2, 12, 0)) == datetime(2026, 10, 2, 12, 0, tzinfo=timezone.utc)

    def test_offset_is_converted(self):
        madrid = timezone(timedelta(hours=2))
        converted = ensure_utc(datetime(2026, 10, 2, 14, 0, tzinfo=madrid))
        assert converted.tzinfo is timezone.utc
        assert converted.hour == 12

    def test_iso8601_uses_z_suffix(self):
        assert to_iso8601(datetime(2026, 10, 2, 12, 0, tzinfo=timezone.utc)) == "2026-10-02T12:00:00Z"
        assert to_iso8601(None) is None
