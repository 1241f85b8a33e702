"""
Utility service for common operations
"""
import time
import uuid
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

CENT = Decimal("0.01")

Number = Union[int, float, Decimal]


class UtilityService:
    @staticmethod
    def to_decimal(value: Number) -> Decimal:
        """Convert a stored float to Decimal without binary noise"""
        if isinstance(value, Decimal):
            return value
        return Decimal(str(value))

    @staticmethod
    def quantize_money(value: Number) -> Decimal:
        """Round to cents, halves away from zero"""
        return UtilityService.to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)

    @staticmethod
    def round_money(value: Number) -> float:
        """Round to cents for JSON output"""
        return float(UtilityService.quantize_money(value))

    @staticmethod
    def generate_line_id() -> str:
        return str(uuid.uuid4())

    @staticmethod
    def generate_order_id() -> str:
        """Generate a simple order ID"""
        return f"ORD_{uuid.uuid4().hex[:8].upper()}"

    @staticmethod
    def epoch_millis() -> int:
        return int(time.time() * 1000)

    @staticmethod
    def generate_message_id(role: str) -> str:
        return f"{role}-{UtilityService.epoch_millis()}"

    @staticmethod
    def generate_voice_session_id() -> str:
        return f"voice_{UtilityService.epoch_millis()}"
