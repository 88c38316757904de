"""
Tests for phone / number / date display helpers.
Run: python -m pytest tests/test_formatting.py -v
"""
import unittest
from datetime import datetime, timedelta, timezone

from utils.formatting import (
    format_date,
    format_korean_phone_number,
    format_number,
    format_phone_number,
    is_valid_phone_number,
    relative_time,
    remove_commas,
)


class TestKoreanPhoneNumber(unittest.TestCase):
    def test_mobile(self):
        self.assertEqual(format_korean_phone_number("01012345678"), "010-1234-5678")

    def test_seoul_ten_digits(self):
        self.assertEqual(format_korean_phone_number("0212345678"), "02-1234-5678")

    def test_seoul_nine_digits(self):
        self.assertEqual(format_korean_phone_number("021234567"), "02-123-4567")

    def test_regional(self):
        self.assertEqual(format_korean_phone_number("0311234567"), "031-123-4567")

    def test_partial_input(self):
        self.assertEqual(format_korean_phone_number("010"), "010")
        self.assertEqual(format_korean_phone_number("0101234"), "010-1234")
        self.assertEqual(format_korean_phone_number("02123"), "02-123")

    def test_existing_hyphens_ignored(self):
        self.assertEqual(format_korean_phone_number("010-1234-5678"), "010-1234-5678")

    def test_overflowing_keeps_extra_digits(self):
        self.assertEqual(format_korean_phone_number("010123456789"), "010-1234-5678")
        self.assertEqual(format_korean_phone_number("010123456789", "overflowing"), "010-1234-56789")

    def test_empty(self):
        self.assertEqual(format_korean_phone_number(""), "")


class TestPhoneHelpers(unittest.TestCase):
    def test_format_phone_number_strips_non_digits(self):
        self.assertEqual(format_phone_number("010 1234 5678"), "010-1234-5678")
        self.assertEqual(format_phone_number("abc"), "")

    def test_valid_numbers(self):
        for number in ("01012345678", "010-1234-5678", "0212345678", "0311234567", "0161234567"):
            with self.subTest(number=number):
                self.assertTrue(is_valid_phone_number(number))

    def test_invalid_numbers(self):
        for number in ("", None, "0101234", "12345678901", "01212345678"):
            with self.subTest(number=number):
                self.assertFalse(is_valid_phone_number(number))


class TestNumbers(unittest.TestCase):
    def test_thousands_separator(self):
        self.assertEqual(format_number(1234567), "1,234,567")
        self.assertEqual(format_number(999), "999")
        self.assertEqual(format_number(0), "0")

    def test_none_is_dash(self):
        self.assertEqual(format_number(None), "-")

    def test_remove_commas_inverts_format_number(self):
        for value in ("0", "7", "1000", "1234567", "1000000000"):
            with self.subTest(value=value):
                self.assertEqual(remove_commas(format_number(value)), value)


class TestDates(unittest.TestCase):
    def test_korean_date_in_seoul_time(self):
        # 15:30 UTC is 00:30 the next day in Seoul
        self.assertEqual(format_date("2023-05-21T15:30:00Z"), "2023년 5월 22일")

    def test_short_format(self):
        self.assertEqual(format_date("2023-05-21T01:00:00Z", short_format=True), "2023.05.21")

    def test_with_time(self):
        self.assertEqual(format_date("2023-05-21T06:30:00Z", with_time=True), "2023년 5월 21일 오후 03:30")

    def test_invalid_input(self):
        self.assertEqual(format_date("not a date"), "")
        self.assertEqual(format_date(None), "")

    def test_relative_time(self):
        now = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)
        self.assertEqual(relative_time(now - timedelta(seconds=10), now=now), "방금 전")
        self.assertEqual(relative_time(now - timedelta(minutes=5), now=now), "5분 전")
        self.assertEqual(relative_time(now - timedelta(hours=3), now=now), "3시간 전")
        self.assertEqual(relative_time(now - timedelta(days=2), now=now), "2일 전")
        self.assertEqual(relative_time(now - timedelta(days=65), now=now), "2개월 전")
        self.assertEqual(relative_time(now - timedelta(days=800), now=now), "2년 전")


if __name__ == "__main__":
    unittest.main()
