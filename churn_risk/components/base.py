"""Base class for risk indicator components."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import pandas as pd

if TYPE_CHECKING:
    from ..config import ScoringConfig


class BaseIndicator(ABC):
    """
    Abstract base class for risk indicators.

    Each indicator flags one churn risk factor for every row using
    vectorized pandas operations. Missing or non-numeric values never
    fire an indicator.
    """

    name: str = "base"

    def __init__(self, config: "ScoringConfig"):
        """
        Initialize indicator with configuration.

        Args:
            config: ScoringConfig instance with thresholds
        """
        self.config = config

    @property
    @abstractmethod
    def column(self) -> str:
        """Column read by this indicator."""
        pass

    @abstractmethod
    def evaluate(self, values: pd.Series) -> pd.Series:
        """
        Flag rows where the risk factor is present.

        Args:
            values: Numeric column values (NaN where missing)

        Returns:
            Boolean Series
        """
        pass

    def flag(self, df: pd.DataFrame) -> pd.Series:
        """Evaluate the indicator over a DataFrame."""
        self.validate(df)
        values = pd.to_numeric(df[self.column], errors="coerce")
        return self.evaluate(values).fillna(False).astype(bool)

    def validate(self, df: pd.DataFrame) -> None:
        """Validate required column exists."""
        if self.column not in df.columns:
            raise ValueError(
                f"{self.__class__.__name__} requires column: {self.column}"
            )
