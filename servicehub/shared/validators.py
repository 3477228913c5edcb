"""Shared validation utilities"""

import re
from datetime import date
from typing import Optional

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
PERIOD_PATTERN = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")


def validate_us_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate and normalize US phone number to E.164 format.

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    digits = re.sub(r"\D", "", phone)

    # Handle +1 prefix
    if digits.startswith("1") and len(digits) == 11:
        digits = digits[1:]

    if len(digits) != 10:
        raise ValueError("Phone number must be 10 digits for US numbers")

    return f"+1{digits}"


def validate_email(email: Optional[str]) -> Optional[str]:
    """Validate email format and lowercase it"""
    if not email:
        return email

    email = email.strip().lower()
    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email


def validate_time_hhmm(value: Optional[str]) -> Optional[str]:
    """Validate a 24h HH:MM time string"""
    if value is None:
        return value
    if not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    return value


def validate_period(value: str) -> str:
    """Validate a YYYY-MM accounting period"""
    if not PERIOD_PATTERN.match(value or ""):
        raise ValueError("Period must be in YYYY-MM format")
    return value


def validate_date_range(start: date, end: date, max_days: int) -> None:
    """Raise ValueError for reversed or oversized date ranges"""
    if end < start:
        raise ValueError("end_date must be on or after start_date")
    if (end - start).days + 1 > max_days:
        raise ValueError(f"Date range cannot exceed {max_days} days")
