"""Late payment indicator."""

import pandas as pd

from .base import BaseIndicator


class LatePaymentIndicator(BaseIndicator):
    """
    Fires when late_payments exceeds the configured threshold (default 3).

    Repeated late payments are the clearest billing-friction signal.
    """

    name = "late_payments"

    @property
    def column(self) -> str:
        return "late_payments"

    def evaluate(self, values: pd.Series) -> pd.Series:
        return values > self.config.late_payments_threshold
