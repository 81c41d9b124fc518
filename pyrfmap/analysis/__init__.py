"""Aggregation, interpolation and visualization functions for PyRFMap."""

from .aggregation import calculate_sensitivity_grid, collect_location_activity
from .interpolation import interpolate_grid, upsample_grid
from .statistics import summarize_sensitivity, peak_location

__all__ = [
    'calculate_sensitivity_grid', 'collect_location_activity',
    'interpolate_grid', 'upsample_grid',
    'summarize_sensitivity', 'peak_location'
]
