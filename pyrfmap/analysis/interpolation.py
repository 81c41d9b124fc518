"""
Smooth upsampling of sensitivity grids for display.

The result is only meant for rendering; the sensitivity grid itself is
never replaced by its interpolated version.
"""

import numpy as np
from scipy.interpolate import RectBivariateSpline
from typing import Tuple


def _grid_spline(grid: np.ndarray) -> RectBivariateSpline:
    grid = np.asarray(grid, dtype=float)
    if grid.ndim != 2 or grid.size == 0:
        raise ValueError("Sensitivity grid must be a non-empty 2D array")

    # Singleton axes are duplicated so the spline is constant along them
    if grid.shape[0] == 1:
        grid = np.vstack([grid, grid])
    if grid.shape[1] == 1:
        grid = np.hstack([grid, grid])

    n_rows, n_cols = grid.shape
    rows = np.arange(1, n_rows + 1, dtype=float)
    cols = np.arange(1, n_cols + 1, dtype=float)

    # Bicubic where there are enough nodes
    kx = min(3, n_rows - 1)
    ky = min(3, n_cols - 1)
    return RectBivariateSpline(rows, cols, grid, kx=kx, ky=ky, s=0)


def interpolate_grid(grid: np.ndarray, row_coords: np.ndarray,
                     col_coords: np.ndarray) -> np.ndarray:
    """
    Evaluate the bicubic interpolant of a grid at given coordinates.

    Parameters
    ----------
    grid : np.ndarray
        Sensitivity grid (rows x cols), nodes at 1..rows and 1..cols
    row_coords, col_coords : np.ndarray
        Increasing 1D coordinates to evaluate at

    Returns
    -------
    np.ndarray
        Interpolated values (len(row_coords) x len(col_coords))
    """
    spline = _grid_spline(grid)
    return spline(np.asarray(row_coords, dtype=float), np.asarray(col_coords, dtype=float))


def upsample_grid(grid: np.ndarray, factor: int = 10) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Upsample a sensitivity grid by an integer factor.

    Fine sample `i` sits at coordinate `1 + i / factor`, so node `r` of
    the original grid is fine sample `(r - 1) * factor` and keeps its
    value exactly. The last `factor - 1` samples of each axis lie past
    the outermost node and hold its value.

    Parameters
    ----------
    grid : np.ndarray
        Sensitivity grid (rows x cols)
    factor : int, default=10
        Upsampling factor

    Returns
    -------
    fine_grid : np.ndarray
        Interpolated grid (rows*factor x cols*factor)
    row_coords, col_coords : np.ndarray
        Grid coordinates of the fine samples, clamped to 1..rows and 1..cols
    """
    if factor < 1:
        raise ValueError("factor must be at least 1")

    n_rows, n_cols = np.shape(grid)
    inner = interpolate_grid(grid,
                             1 + np.arange((n_rows - 1) * factor + 1) / factor,
                             1 + np.arange((n_cols - 1) * factor + 1) / factor)
    fine_grid = np.pad(inner, ((0, factor - 1), (0, factor - 1)), mode='edge')

    row_coords = np.minimum(1 + np.arange(n_rows * factor) / factor, n_rows)
    col_coords = np.minimum(1 + np.arange(n_cols * factor) / factor, n_cols)

    return fine_grid, row_coords, col_coords
