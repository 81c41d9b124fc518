"""
Aggregation of simulated responses into a sensitivity grid.

For each grid location, the activity of all channels during every
presentation of that location is pooled and averaged, giving one mean
response per grid cell.
"""

import numpy as np
import warnings
from typing import Tuple

from ..core.data_structures import TrialDesign, TrialTiming, location_to_coords
from ..core.exceptions import ConfigurationError, DataIntegrityWarning


def collect_location_activity(activity: np.ndarray, design: TrialDesign,
                              timing: TrialTiming, location: int) -> np.ndarray:
    """
    Pool the activity recorded while `location` was shown.

    Parameters
    ----------
    activity : np.ndarray
        Experiment activity (n_trials x n_channels x n_samples)
    design : TrialDesign
        Trial design the activity was simulated from
    timing : TrialTiming
        Trial timeline
    location : int
        Location id

    Returns
    -------
    np.ndarray
        (occurrences x n_channels x stimulus_duration); first axis is
        empty if the location was never shown
    """
    windows = timing.stimulus_windows()
    slices = []
    for trial_idx, trial_locations in enumerate(design.locations):
        for slot_idx, shown in enumerate(trial_locations):
            if shown == location:
                start, stop = windows[slot_idx]
                slices.append(activity[trial_idx, :, start:stop])

    if not slices:
        return np.empty((0, activity.shape[1], timing.stimulus_duration))
    return np.stack(slices)


def calculate_sensitivity_grid(activity: np.ndarray, design: TrialDesign,
                               grid_shape: Tuple[int, int],
                               timing: TrialTiming) -> np.ndarray:
    """
    Compute the mean response attributable to each grid location.

    Parameters
    ----------
    activity : np.ndarray
        Experiment activity (n_trials x n_channels x n_samples)
    design : TrialDesign
        Trial design
    grid_shape : tuple of int
        (rows, cols)
    timing : TrialTiming
        Trial timeline used to locate the stimulus windows

    Returns
    -------
    np.ndarray
        Sensitivity grid (rows x cols). Locations that were never shown
        are left at 0 and reported with a DataIntegrityWarning.
    """
    n_rows, n_cols = grid_shape
    response_grid = np.zeros((n_rows, n_cols))

    if design.n_trials == 0:
        return response_grid

    activity = np.asarray(activity)
    if activity.ndim != 3:
        raise ConfigurationError("Activity must be a 3D array (trials x channels x time)")
    if activity.shape[0] != design.n_trials:
        raise ConfigurationError(
            f"Activity has {activity.shape[0]} trials but the design has {design.n_trials}")
    if activity.shape[2] < timing.recording_duration:
        raise ConfigurationError(
            f"Activity has {activity.shape[2]} samples per trial, "
            f"timeline needs {timing.recording_duration}")
    if design.targets_per_trial > timing.n_stimuli:
        raise ConfigurationError(
            f"Design shows {design.targets_per_trial} stimuli per trial but the "
            f"timeline has {timing.n_stimuli} stimulus windows")

    n_locations = n_rows * n_cols
    if design.locations.min() < 1 or design.locations.max() > n_locations:
        raise ConfigurationError(
            f"Design contains locations outside the {n_rows}x{n_cols} grid")

    missing = []
    for loc in range(1, n_locations + 1):
        loc_activity = collect_location_activity(activity, design, timing, loc)
        if loc_activity.shape[0] == 0:
            missing.append(loc)
            continue

        # Average across time, channels and trials
        mean_response = loc_activity.mean(axis=2).mean(axis=1).mean(axis=0)
        row, col = location_to_coords(loc, grid_shape)
        response_grid[row - 1, col - 1] = mean_response

    if missing:
        warnings.warn(f"No presentations found for locations {missing}; "
                      f"their cells are left at 0", DataIntegrityWarning)

    return response_grid
