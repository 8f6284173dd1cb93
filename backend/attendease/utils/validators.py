"""Validation utilities for request payloads."""
from typing import Dict, List, Optional

from attendease.errors import ValidationError

class Validator:
    """Validation helper class."""

    @staticmethod
    def require_fields(data: Optional[Dict], required_fields: List[str]) -> Dict:
        """Raise ValidationError naming every missing or blank field."""
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")

        missing = []
        for field in required_fields:
            value = data.get(field)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(field)

        if missing:
            raise ValidationError(f"Missing required field: {', '.join(missing)}")
        return data

    @staticmethod
    def validate_text(value, field: str, max_length: int = 255, required: bool = True) -> Optional[str]:
        """Strip and bound a free-text field."""
        if value is None or (isinstance(value, str) and not value.strip()):
            if required:
                raise ValidationError(f"{field} is required")
            return None
        if not isinstance(value, str):
            raise ValidationError(f"{field} must be a string")
        value = value.strip()
        if len(value) > max_length:
            raise ValidationError(f"{field} is too long")
        return value

    @staticmethod
    def validate_latitude(value) -> float:
        latitude = Validator._as_float(value, 'latitude')
        if not -90.0 <= latitude <= 90.0:
            raise ValidationError("latitude must be between -90 and 90")
        return latitude

    @staticmethod
    def validate_longitude(value) -> float:
        longitude = Validator._as_float(value, 'longitude')
        if not -180.0 <= longitude <= 180.0:
            raise ValidationError("longitude must be between -180 and 180")
        return longitude

    @staticmethod
    def validate_radius(value) -> float:
        radius = Validator._as_float(value, 'max_distance_meters')
        if radius <= 0:
            raise ValidationError("max_distance_meters must be positive")
        return radius

    @staticmethod
    def _as_float(value, field: str) -> float:
        if isinstance(value, bool):
            raise ValidationError(f"{field} must be a number")
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ValidationError(f"{field} must be a number")
