"""
Schedule Recommendation Exporter
Writes a scheduling result to Excel for planner review before it is applied.
"""

import pandas as pd
from typing import List, Dict, Any

from algorithms.recommender import SchedulingResult


RECOMMENDATION_COLUMNS = [
    'Rank', 'WO#', 'Step', 'Score', 'Priority',
    'Priority Bonus', 'Date Term', 'Aging Term', 'Flow Bonus', 'Predicted Flow',
]
UTILIZATION_COLUMNS = [
    'Step', 'Constraint', 'Orders Planned', 'Order Capacity', 'Used Minutes',
    'Available Minutes', 'Utilization %', 'Overtime Minutes',
]
SKIPPED_COLUMNS = ['WO#', 'Reason']


def recommendations_frame(result: SchedulingResult) -> pd.DataFrame:
    """One row per accepted recommendation, in rank order."""
    rows = []
    for rank, rec in enumerate(result.recommendations, 1):
        details = rec.score_details
        flow = ' -> '.join(f"{f.step_name} ({f.eta_offset:.1f}-{f.eta_end:.1f}h)"
                           for f in rec.predicted_flow)
        rows.append({
            'Rank': rank,
            'WO#': rec.wo_id,
            'Step': rec.step_name,
            'Score': round(rec.score, 2),
            'Priority': rec.priority.value,
            'Priority Bonus': round(details.priority_bonus, 2) if details else None,
            'Date Term': round(details.date_term, 2) if details else None,
            'Aging Term': round(details.aging_term, 2) if details else None,
            'Flow Bonus': round(details.flow_score, 2) if details else None,
            'Predicted Flow': flow,
        })
    return pd.DataFrame(rows, columns=RECOMMENDATION_COLUMNS)


def utilization_frame(result: SchedulingResult) -> pd.DataFrame:
    """One row per step, in process sequence."""
    rows = []
    for step, util in result.step_utilization.items():
        rows.append({
            'Step': step,
            'Constraint': util.constraint_level.value,
            'Orders Planned': util.count,
            'Order Capacity': util.order_capacity,
            'Used Minutes': round(util.used_minutes, 1),
            'Available Minutes': None if util.is_unlimited else round(util.total_minutes, 1),
            'Utilization %': util.utilization_pct,
            'Overtime Minutes': round(util.overtime_minutes, 1),
        })
    return pd.DataFrame(rows, columns=UTILIZATION_COLUMNS)


def skipped_frame(result: SchedulingResult) -> pd.DataFrame:
    rows = [{'WO#': d.get('woId', ''), 'Reason': d.get('reason', '')} for d in result.diagnostics]
    return pd.DataFrame(rows, columns=SKIPPED_COLUMNS)


def _autosize(worksheet, df: pd.DataFrame, max_width: int = 40):
    """Fit column widths to content and freeze the header row."""
    from openpyxl.utils import get_column_letter

    for idx, col in enumerate(df.columns):
        col_data = df[col].fillna('').astype(str)
        max_data_len = col_data.str.len().max() if len(col_data) > 0 else 0
        max_length = max(max_data_len, len(col)) + 2
        worksheet.column_dimensions[get_column_letter(idx + 1)].width = min(max_length, max_width)
    worksheet.freeze_panes = 'A2'


def export_schedule(result: SchedulingResult, output_path: str) -> str:
    """
    Export a scheduling result to Excel.

    Sheets:
    - Recommendations: ranked orders with score breakdown and predicted flow
    - Step Utilization: minutes used vs available per step
    - Skipped: orders left out of this run and why

    Args:
        result: Output of recommend()
        output_path: Path for output Excel file

    Returns:
        Path to the created file
    """
    sheets = {
        'Recommendations': recommendations_frame(result),
        'Step Utilization': utilization_frame(result),
        'Skipped': skipped_frame(result),
    }

    with pd.ExcelWriter(output_path, engine='openpyxl') as writer:
        for sheet_name, df in sheets.items():
            df.to_excel(writer, sheet_name=sheet_name, index=False)
            _autosize(writer.sheets[sheet_name], df, max_width=60 if sheet_name == 'Recommendations' else 30)

    print(f"[OK] Schedule recommendations exported to: {output_path}")
    return output_path
