"""
Summary statistics for sensitivity grids.
"""

import numpy as np
from typing import Dict, Any, Optional

from ..core.data_structures import coords_to_location, location_to_coords
from ..core.prf_functions import grid_distance


def peak_location(grid: np.ndarray) -> int:
    """Location id of the grid cell with the highest mean response."""
    row, col = np.unravel_index(np.argmax(grid), np.shape(grid))
    return int(coords_to_location(row + 1, col + 1, np.shape(grid)))


def summarize_sensitivity(grid: np.ndarray,
                          true_peak: Optional[int] = None) -> Dict[str, Any]:
    """
    Calculate summary statistics for a sensitivity grid.

    Parameters
    ----------
    grid : np.ndarray
        Sensitivity grid (rows x cols)
    true_peak : int, optional
        Location id of the simulated population peak

    Returns
    -------
    dict
        Peak location and coordinates, value range and, when `true_peak`
        is given, whether it was recovered and how far off the estimate is
    """
    grid = np.asarray(grid, dtype=float)
    estimated = peak_location(grid)
    est_row, est_col = location_to_coords(estimated, grid.shape)

    stats = {
        'peak_location': estimated,
        'peak_coords': (int(est_row), int(est_col)),
        'peak_value': float(np.max(grid)),
        'min': float(np.min(grid)),
        'max': float(np.max(grid)),
        'mean': float(np.mean(grid)),
        'std': float(np.std(grid)),
    }

    if true_peak is not None:
        true_row, true_col = location_to_coords(true_peak, grid.shape)
        stats['true_peak_location'] = int(true_peak)
        stats['true_peak_coords'] = (int(true_row), int(true_col))
        stats['peak_recovered'] = estimated == int(true_peak)
        stats['peak_error'] = float(grid_distance(est_row, est_col, true_row, true_col))

    return stats
