#!/usr/bin/env python3
"""
validators.py
--------------------
Data validation and normalization utilities for all Radia store operations.

Provides type-safe conversion and shape checks used by the entity
dataclasses, the repositories and the import codec.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from .exceptions import ValidationError


class DataValidator:
    """Centralized data validation for store operations."""

    @staticmethod
    def ensure_list(value: Any, what: str) -> List[Any]:
        """
        Check that a collection value is a list.

        Args:
            value: Value to check
            what: Collection name used in the error message

        Returns:
            The value itself

        Raises:
            ValidationError: If value is not a list
        """
        if not isinstance(value, list):
            raise ValidationError(
                f"Expected a list for {what}, got {type(value).__name__}"
            )
        return value

    @staticmethod
    def ensure_mapping(value: Any, what: str) -> Dict[str, Any]:
        """
        Check that a value is a dict (a JSON object).

        Raises:
            ValidationError: If value is not a dict
        """
        if not isinstance(value, dict):
            raise ValidationError(
                f"Expected an object for {what}, got {type(value).__name__}"
            )
        return value

    @staticmethod
    def normalize_bool(value: Any, default: bool = False) -> bool:
        """
        Convert various inputs to boolean.

        Args:
            value: Value to convert
            default: Result for None

        Returns:
            Boolean value

        Raises:
            ValidationError: If conversion fails
        """
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        elif isinstance(value, (int, float)):
            if value == 0:
                return False
            elif value == 1:
                return True
            else:
                raise ValidationError(f"Cannot convert numeric '{value}' to boolean")
        elif isinstance(value, str):
            if value.lower() in ("true", "1", "yes", "on"):
                return True
            elif value.lower() in ("false", "0", "no", "off"):
                return False
            else:
                raise ValidationError(f"Cannot convert '{value}' to boolean")
        return bool(value)

    @staticmethod
    def normalize_int(value: Any, default: int = 0) -> int:
        """
        Convert value to integer safely.

        Args:
            value: Value to convert
            default: Result for None or unparseable input

        Returns:
            Integer value
        """
        if value is None or isinstance(value, bool):
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    @staticmethod
    def normalize_number(value: Any, default: float = 0) -> float:
        """
        Convert value to a number, keeping ints as ints.

        Returns:
            int or float value
        """
        if value is None or isinstance(value, bool):
            return default
        if isinstance(value, (int, float)):
            return value
        try:
            number = float(value)
        except (TypeError, ValueError):
            return default
        return int(number) if number.is_integer() else number

    @staticmethod
    def normalize_string(value: Any) -> Optional[str]:
        """Normalize string value; None and empty strings become None."""
        if value is None:
            return None
        text = str(value)
        return text if text else None

    @staticmethod
    def normalize_string_list(value: Any) -> List[str]:
        """Convert a list of ids to a list of strings; anything else becomes []."""
        if not isinstance(value, (list, tuple, set)):
            return []
        return [str(item) for item in value if item is not None]

    @staticmethod
    def normalize_counter_map(value: Any) -> Dict[str, float]:
        """
        Normalize a {key: number} ledger.

        Non-numeric values are dropped.
        """
        if not isinstance(value, dict):
            return {}
        result: Dict[str, float] = {}
        for key, amount in value.items():
            if isinstance(amount, bool) or not isinstance(amount, (int, float)):
                continue
            result[str(key)] = amount
        return result

    @staticmethod
    def parse_date(value: Any) -> Optional[date]:
        """
        Parse a day-granularity date.

        Accepts date/datetime objects and ISO strings ("2026-10-19" or a full
        ISO timestamp, of which only the date part is used).

        Returns:
            date or None if the value cannot be parsed
        """
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str) and len(value) >= 10:
            try:
                return date.fromisoformat(value[:10])
            except ValueError:
                return None
        return None

    @staticmethod
    def parse_datetime(value: Any) -> Optional[datetime]:
        """
        Parse an ISO-8601 timestamp, accepting a trailing 'Z'.

        Returns:
            datetime or None if the value cannot be parsed
        """
        if isinstance(value, datetime):
            return value
        if not isinstance(value, str) or not value:
            return None
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
