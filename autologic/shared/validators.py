"""Shared validation utilities"""

import re
from datetime import date
from typing import Optional

TIME_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")
PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{6,15}$")
EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
VIN_PATTERN = re.compile(r"^[A-HJ-NPR-Z0-9]{17}$")


def validate_appointment_time(value: str) -> str:
    """
    Validate a 24-hour "H:MM" / "HH:MM" time and normalize it to "HH:MM".

    Raises:
        ValueError: If the time does not match the pattern
    """
    value = (value or "").strip()
    if not TIME_PATTERN.match(value):
        raise ValueError("Valid time format required (HH:MM)")
    hours, minutes = value.split(":")
    return f"{int(hours):02d}:{minutes}"


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate an international phone number.

    Spaces, dashes, dots and parentheses are dropped; a leading "+" is kept.

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    cleaned = re.sub(r"[\s\-\.\(\)]", "", phone)
    if not PHONE_PATTERN.match(cleaned):
        raise ValueError("Valid phone number is required")
    return cleaned


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise ValueError("Valid email is required")
    return email


def validate_car_year(year: int) -> int:
    max_year = date.today().year + 1
    if year < 1900 or year > max_year:
        raise ValueError(f"Car year must be between 1900 and {max_year}")
    return year


def validate_vin(vin: Optional[str]) -> Optional[str]:
    if not vin:
        return vin
    vin = vin.strip().upper()
    if not VIN_PATTERN.match(vin):
        raise ValueError("VIN must be 17 characters (letters I, O and Q are not allowed)")
    return vin


def validate_choice(value: Optional[str], choices: tuple, label: str) -> Optional[str]:
    if value is None:
        return value
    if value not in choices:
        raise ValueError(f"Invalid {label}. Must be one of: {', '.join(choices)}")
    return value
