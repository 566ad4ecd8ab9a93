"""
Order Snapshots
Converts planner table rows held in a pandas DataFrame into the plain order
dicts the recommendation engine consumes.
"""

from typing import Dict, List, Any

import pandas as pd


def _clean_value(value: Any) -> Any:
    """NaN/NaT -> '', Timestamp -> datetime, numpy scalars -> Python scalars."""
    if isinstance(value, (list, dict)):
        return value
    if pd.isna(value):
        return ''
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if hasattr(value, 'item'):
        return value.item()
    return value


def orders_from_frame(df: pd.DataFrame, wo_column: str = 'woId') -> List[Dict[str, Any]]:
    """
    Build order snapshots from a DataFrame with one row per work order.

    Column names are kept as-is (step names, 'Priority', 'WO DUE', ...).
    Empty cells become '' so the step classifier reads them as not started.

    Args:
        df: Planner rows
        wo_column: Column holding the work order id; copied to 'woId' when
                   it has a different name (e.g. 'WO ID')

    Returns:
        List of order dicts in row order
    """
    if df is None or df.empty:
        return []

    orders = []
    for record in df.to_dict(orient='records'):
        order = {str(k).strip(): _clean_value(v) for k, v in record.items()}
        if wo_column != 'woId' and wo_column in order and not order.get('woId'):
            value = order[wo_column]
            if isinstance(value, float) and value.is_integer():
                value = int(value)
            order['woId'] = str(value).strip()
        orders.append(order)

    return orders
