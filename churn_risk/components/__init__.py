"""Risk indicator components for churn scoring."""

from .base import BaseIndicator
from .payments import LatePaymentIndicator
from .support import ServiceCallIndicator
from .device import DeviceAgeIndicator
from .charge import MonthlyChargeIndicator
from .tenure import TenureIndicator

__all__ = [
    "BaseIndicator",
    "LatePaymentIndicator",
    "ServiceCallIndicator",
    "DeviceAgeIndicator",
    "MonthlyChargeIndicator",
    "TenureIndicator",
]
