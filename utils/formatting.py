"""
Display helpers shared by the API and the scripts: Korean phone numbers,
thousands separators, and dates in Korean format (Asia/Seoul).
"""
from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Optional, Union
from zoneinfo import ZoneInfo

SEOUL = ZoneInfo("Asia/Seoul")

_VALID_PHONE = re.compile(r"^(01[016789]\d{7,8}|02\d{7,8}|0[3-9]\d{7,8})$")
_THOUSANDS = re.compile(r"\B(?=(\d{3})+(?!\d))")


def format_phone_number(value: str) -> str:
    """Digits only, grouped 3-4-4 as the user types."""
    only_nums = re.sub(r"[^\d]", "", value or "")
    if not only_nums:
        return ""
    if len(only_nums) <= 3:
        return only_nums
    if len(only_nums) <= 7:
        return f"{only_nums[:3]}-{only_nums[3:]}"
    return f"{only_nums[:3]}-{only_nums[3:7]}-{only_nums[7:11]}"


def format_korean_phone_number(value: str, type: str = "") -> str:
    """
    Hyphenate a Korean phone number.

    Seoul numbers (02) become 02-XXX-XXXX or 02-XXXX-XXXX, mobiles (010)
    010-XXXX-XXXX, other area codes XXX-XXX-XXXX. With type="overflowing"
    digits past the usual length are kept on the last group instead of dropped.
    """
    clean = (value or "").replace("-", "")
    if not clean:
        return ""
    overflowing = type == "overflowing"

    if clean.startswith("02"):
        if len(clean) <= 2:
            return clean
        if len(clean) <= 5:
            return f"{clean[:2]}-{clean[2:]}"
        if len(clean) <= 9:
            return f"{clean[:2]}-{clean[2:5]}-{clean[5:]}"
        if len(clean) <= 10 or not overflowing:
            return f"{clean[:2]}-{clean[2:6]}-{clean[6:10]}"
        return f"{clean[:2]}-{clean[2:6]}-{clean[6:]}"

    if clean.startswith("010"):
        if len(clean) <= 3:
            return clean
        if len(clean) <= 7:
            return f"{clean[:3]}-{clean[3:]}"
        if len(clean) <= 11 or not overflowing:
            return f"{clean[:3]}-{clean[3:7]}-{clean[7:11]}"
        return f"{clean[:3]}-{clean[3:7]}-{clean[7:]}"

    if len(clean) <= 3:
        return clean
    if len(clean) <= 6:
        return f"{clean[:3]}-{clean[3:]}"
    if len(clean) <= 10 or not overflowing:
        return f"{clean[:3]}-{clean[3:6]}-{clean[6:10]}"
    return f"{clean[:3]}-{clean[3:6]}-{clean[6:]}"


def is_valid_phone_number(phone_number: Optional[str]) -> bool:
    """Mobile (01x), Seoul (02) or regional (03x-09x) numbers, 10-11 digits, hyphens ignored."""
    if not phone_number:
        return False
    return bool(_VALID_PHONE.match(re.sub(r"[^\d]", "", phone_number)))


def format_number(num: Any) -> str:
    if num is None:
        return "-"
    return _THOUSANDS.sub(",", str(num))


def remove_commas(value: Any) -> str:
    if value is None:
        return ""
    return str(value).replace(",", "")


def _to_datetime(value: Union[str, datetime, None]) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_date(value: Union[str, datetime, None], with_time: bool = False, short_format: bool = False) -> str:
    """2023년 5월 21일, 2023년 5월 21일 오후 03:30, or 2023.05.21 (short). Empty string on bad input."""
    dt = _to_datetime(value)
    if dt is None:
        return ""
    local = dt.astimezone(SEOUL)
    if short_format:
        return f"{local.year}.{local.month:02d}.{local.day:02d}"
    text = f"{local.year}년 {local.month}월 {local.day}일"
    if with_time:
        text = f"{text} {format_time(local)}"
    return text


def format_time(value: Union[str, datetime, None]) -> str:
    dt = _to_datetime(value)
    if dt is None:
        return ""
    local = dt.astimezone(SEOUL)
    meridiem = "오전" if local.hour < 12 else "오후"
    hour = local.hour % 12 or 12
    return f"{meridiem} {hour:02d}:{local.minute:02d}"


def relative_time(value: Union[str, datetime, None], now: Optional[datetime] = None) -> str:
    dt = _to_datetime(value)
    if dt is None:
        return ""
    now = now or datetime.now(timezone.utc)
    seconds = int((now - dt).total_seconds())
    if seconds < 60:
        return "방금 전"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes}분 전"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}시간 전"
    days = hours // 24
    if days < 30:
        return f"{days}일 전"
    months = days // 30
    if months < 12:
        return f"{months}개월 전"
    return f"{months // 12}년 전"
