"""Customer service contact indicator."""

import pandas as pd

from .base import BaseIndicator


class ServiceCallIndicator(BaseIndicator):
    """
    Fires when customer_service_calls exceeds the threshold (default 5).

    Frequent support contact usually means unresolved complaints.
    """

    name = "service_calls"

    @property
    def column(self) -> str:
        return "customer_service_calls"

    def evaluate(self, values: pd.Series) -> pd.Series:
        return values > self.config.service_calls_threshold
