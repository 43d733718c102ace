"""Device age indicator."""

import pandas as pd

from .base import BaseIndicator


class DeviceAgeIndicator(BaseIndicator):
    """
    Fires when device_age_months exceeds the threshold (default 36).

    Customers on old handsets are shopping for upgrades, often with a
    competitor's bundle.
    """

    name = "device_age"

    @property
    def column(self) -> str:
        return "device_age_months"

    def evaluate(self, values: pd.Series) -> pd.Series:
        return values > self.config.device_age_threshold
