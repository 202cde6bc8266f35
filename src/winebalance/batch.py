"""
Batch balance scoring over DataFrames.
"""

import logging
from dataclasses import asdict
from typing import Dict, Optional

import pandas as pd

from winebalance.balance import BalanceEngine
from winebalance.constants import CHARACTERISTICS
from winebalance.schema import CharacteristicCalculation

logger = logging.getLogger(__name__)

BALANCE_COLUMN = "balance"


def add_balance_to_dataframe(
    df: pd.DataFrame,
    engine: Optional[BalanceEngine] = None,
    column: str = BALANCE_COLUMN
) -> pd.DataFrame:
    """
    Add a balance score column to a DataFrame of wines.

    Args:
        df: One row per wine with a column per characteristic
        engine: Engine to score with; defaults to the shipped configuration
        column: Name of the added column

    Returns:
        Copy of df with the balance column added
    """
    if len(df) == 0:
        return df

    engine = engine or BalanceEngine()
    df = df.copy()

    df[column] = df.apply(lambda row: engine.score(row).score, axis=1)

    logger.debug(f"Scored balance for {len(df)} wines")

    return df


def breakdown_to_dataframe(breakdown: Dict[str, CharacteristicCalculation]) -> pd.DataFrame:
    """
    Tabulate a characteristic breakdown, one row per characteristic.

    The adjusted range is split into range_min / range_max columns.
    """
    names = [name for name in CHARACTERISTICS if name in breakdown]
    rows = []
    for name in names:
        row = asdict(breakdown[name])
        row['range_min'], row['range_max'] = row.pop('adjusted_range')
        rows.append(row)

    return pd.DataFrame(rows, index=pd.Index(names, name="characteristic"))
