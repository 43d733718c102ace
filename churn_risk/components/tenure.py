"""Account tenure indicator."""

import pandas as pd

from .base import BaseIndicator


class TenureIndicator(BaseIndicator):
    """
    Fires when account_length_months is below the threshold (default 12).

    First-year accounts have not yet settled into the network.
    """

    name = "tenure"

    @property
    def column(self) -> str:
        return "account_length_months"

    def evaluate(self, values: pd.Series) -> pd.Series:
        return values < self.config.account_length_threshold
