"""
Core receptive field functions.

This module contains the spatial tuning model of the simulated channel
population: the Gaussian response kernel and the sampling of each
channel's preferred grid location around the population peak.
"""

import numpy as np
from typing import Tuple, Optional, Union

from .data_structures import ChannelTuning, location_to_coords
from .exceptions import ConfigurationError


def tuning_sigma(total_locations: int) -> float:
    """
    Spatial spread of the channel population.

    Parameters
    ----------
    total_locations : int
        Number of grid locations

    Returns
    -------
    float
        sqrt(total_locations) / 6, in grid units
    """
    if total_locations < 1:
        raise ConfigurationError("total_locations must be positive")
    return float(np.sqrt(total_locations) / 6)


def gaussian_response(distance: Union[float, np.ndarray], sigma: float) -> Union[float, np.ndarray]:
    """
    Isotropic Gaussian response kernel.

    Parameters
    ----------
    distance : float or np.ndarray
        Euclidean distance between preferred and shown location (grid units)
    sigma : float
        Spread of the kernel

    Returns
    -------
    float or np.ndarray
        exp(-0.5 * (distance / sigma)**2), in [0, 1]
    """
    if sigma <= 0:
        raise ValueError("sigma must be positive")
    return np.exp(-0.5 * (np.asarray(distance, dtype=float) / sigma) ** 2)


def grid_distance(rows_a, cols_a, rows_b, cols_b) -> np.ndarray:
    """Euclidean distance between grid coordinates."""
    return np.sqrt((np.asarray(rows_a) - rows_b) ** 2 + (np.asarray(cols_a) - cols_b) ** 2)


def _round_half_away(x: np.ndarray) -> np.ndarray:
    return np.sign(x) * np.floor(np.abs(x) + 0.5)


def sample_channel_tuning(num_channels: int, peak_location: int,
                          grid_shape: Tuple[int, int],
                          rng: Optional[np.random.Generator] = None,
                          sigma: Optional[float] = None) -> ChannelTuning:
    """
    Draw a preferred grid location for every channel.

    Channels are spread over evenly spaced directions around the peak,
    channel i at angle 2*pi*i/num_channels, each with a Rayleigh
    distributed radius sigma*sqrt(-2*ln(U)). The rounded positions wrap
    around the grid edges (toroidally) so they stay valid cells.

    Parameters
    ----------
    num_channels : int
        Number of simulated channels
    peak_location : int
        Location id of the population peak sensitivity
    grid_shape : tuple of int
        (rows, cols)
    rng : np.random.Generator, optional
        Random source (a fresh default generator if omitted)
    sigma : float, optional
        Radial spread (defaults to sqrt(rows*cols)/6)

    Returns
    -------
    ChannelTuning
        Preferred (row, col) per channel
    """
    if num_channels < 1:
        raise ConfigurationError("num_channels must be positive")
    if rng is None:
        rng = np.random.default_rng()

    n_rows, n_cols = grid_shape
    if sigma is None:
        sigma = tuning_sigma(n_rows * n_cols)

    peak_row, peak_col = location_to_coords(peak_location, grid_shape)

    channel_idx = np.arange(1, num_channels + 1)
    angles = 2 * np.pi * channel_idx / num_channels

    # U in (0, 1] keeps the log finite
    u = 1.0 - rng.random(num_channels)
    radii = sigma * np.sqrt(-2 * np.log(u))

    pref_rows = _round_half_away(peak_row + radii * np.cos(angles)).astype(int)
    pref_cols = _round_half_away(peak_col + radii * np.sin(angles)).astype(int)

    # Wrap around grid boundaries
    pref_rows = np.mod(pref_rows - 1, n_rows) + 1
    pref_cols = np.mod(pref_cols - 1, n_cols) + 1

    return ChannelTuning(np.column_stack([pref_rows, pref_cols]),
                         int(peak_location), float(sigma), grid_shape)


def response_strengths(tuning: ChannelTuning, location: int) -> np.ndarray:
    """
    Response strength of every channel to a stimulus at `location`.

    Returns
    -------
    np.ndarray
        (n_channels,) values in [0, 1]; 1 where the channel prefers `location`
    """
    row, col = location_to_coords(location, tuning.grid_shape)
    distance = grid_distance(tuning.preferred_locations[:, 0],
                             tuning.preferred_locations[:, 1], row, col)
    return gaussian_response(distance, tuning.sigma)
