"""
Exporters package
Export scheduling results to various formats.
"""

from .schedule_exporter import (
    export_schedule,
    recommendations_frame,
    utilization_frame,
    skipped_frame
)

__all__ = [
    'export_schedule',
    'recommendations_frame',
    'utilization_frame',
    'skipped_frame'
]
