"""Monthly charge indicator."""

import pandas as pd

from .base import BaseIndicator


class MonthlyChargeIndicator(BaseIndicator):
    """
    Fires when monthly_charge exceeds the threshold (default 60 GHS).

    High bills make price-driven switching more attractive.
    """

    name = "monthly_charge"

    @property
    def column(self) -> str:
        return "monthly_charge"

    def evaluate(self, values: pd.Series) -> pd.Series:
        return values > self.config.monthly_charge_threshold
