"""
Counterbalanced trial design generation.

Each repetition block is a random permutation of all grid locations
cut into consecutive groups of `targets_per_trial`; every group is one
trial. Within a block every location appears once, so across blocks
each location appears exactly `repetitions_per_location` times and no
trial repeats a location.
"""

import numpy as np
from typing import Optional

from ..core.data_structures import TrialDesign
from ..core.exceptions import ConfigurationError, DesignIntegrityError


def generate_trial_design(total_locations: int, repetitions_per_location: int,
                          targets_per_trial: int,
                          rng: Optional[np.random.Generator] = None,
                          verify: bool = True) -> TrialDesign:
    """
    Generate a balanced randomized trial design.

    Parameters
    ----------
    total_locations : int
        Number of grid locations (ids 1..total_locations)
    repetitions_per_location : int
        Times each location is shown across the experiment
    targets_per_trial : int
        Distinct locations shown per trial
    rng : np.random.Generator, optional
        Random source (a fresh default generator if omitted)
    verify : bool, default=True
        Run `verify_trial_design` on the result

    Returns
    -------
    TrialDesign
        Design with total_locations * repetitions / targets trials
    """
    if total_locations < 1:
        raise ConfigurationError("total_locations must be positive")
    if targets_per_trial < 1:
        raise ConfigurationError("targets_per_trial must be positive")
    if repetitions_per_location < 0:
        raise ConfigurationError("repetitions_per_location cannot be negative")
    if total_locations % targets_per_trial != 0:
        raise ConfigurationError(
            f"Total locations ({total_locations}) must be divisible by "
            f"targets per trial ({targets_per_trial})")
    if (total_locations * repetitions_per_location) % targets_per_trial != 0:
        raise ConfigurationError("Design does not yield an integer number of trials")

    if rng is None:
        rng = np.random.default_rng()

    trials_per_block = total_locations // targets_per_trial
    locations = np.zeros((repetitions_per_location * trials_per_block, targets_per_trial),
                         dtype=int)

    for block in range(repetitions_per_location):
        shuffled = rng.permutation(total_locations) + 1
        start = block * trials_per_block
        locations[start:start + trials_per_block, :] = shuffled.reshape(
            trials_per_block, targets_per_trial)

    design = TrialDesign(locations, total_locations, repetitions_per_location)

    if verify:
        verify_trial_design(design, targets_per_trial)

    return design


def verify_trial_design(design: TrialDesign, targets_per_trial: Optional[int] = None) -> None:
    """
    Check a trial design against its balancing constraints.

    Verifies the trial count, the number of distinct locations per
    trial, that every id is a valid location and that every location is
    shown exactly `repetitions_per_location` times.

    Parameters
    ----------
    design : TrialDesign
        Design to verify
    targets_per_trial : int, optional
        Expected trial width (defaults to the design's own width)

    Raises
    ------
    DesignIntegrityError
        On the first failed check, with expected and actual values
    """
    if targets_per_trial is None:
        targets_per_trial = design.targets_per_trial
    total = design.total_locations
    repetitions = design.repetitions_per_location

    # 1. Total number of trials
    expected_trials = total * repetitions // targets_per_trial
    if design.n_trials != expected_trials:
        raise DesignIntegrityError('trial_count', expected_trials, design.n_trials,
                                   f"Mismatch in the total number of trials. "
                                   f"Expected: {expected_trials}, Found: {design.n_trials}")

    if design.targets_per_trial != targets_per_trial:
        raise DesignIntegrityError('trial_width', targets_per_trial, design.targets_per_trial)

    if design.n_trials == 0:
        return

    locations = design.locations

    # 2. Unique targets per trial
    n_unique = np.array([len(np.unique(trial)) for trial in locations])
    bad_trials = np.flatnonzero(n_unique != targets_per_trial)
    if bad_trials.size > 0:
        raise DesignIntegrityError(
            'unique_targets', targets_per_trial, int(n_unique[bad_trials[0]]),
            f"Not all trials have {targets_per_trial} unique targets "
            f"(first offending trial: {int(bad_trials[0])})")

    if locations.min() < 1 or locations.max() > total:
        raise DesignIntegrityError('location_range', (1, total),
                                   (int(locations.min()), int(locations.max())))

    # 3. Repetitions of each location
    counts = design.location_counts()
    bad_locations = np.flatnonzero(counts != repetitions)
    if bad_locations.size > 0:
        location = int(bad_locations[0]) + 1
        raise DesignIntegrityError(
            'repetitions', repetitions, int(counts[bad_locations[0]]),
            f"Not all locations are repeated {repetitions} times "
            f"(location {location} shown {int(counts[bad_locations[0]])} times)")
