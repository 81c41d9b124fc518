"""
Simulation of multi-channel responses to stimulus trials.

Every channel carries low-amplitude uniform noise for the whole trial.
During each stimulus window the channel gets an extra uniform random
response scaled by the Gaussian kernel of the distance between its
preferred location and the shown location.
"""

import numpy as np
from typing import Callable, Optional, Sequence

from ..core.data_structures import (
    ChannelTuning, StimulusEvent, TrialDesign, TrialTiming
)
from ..core.exceptions import ConfigurationError
from ..core.prf_functions import response_strengths


ProgressCallback = Callable[[StimulusEvent], None]


def simulate_trial_activity(trial_locations: Sequence[int], tuning: ChannelTuning,
                            timing: TrialTiming,
                            rng: Optional[np.random.Generator] = None,
                            noise_amplitude: float = 0.1) -> np.ndarray:
    """
    Simulate the activity of all channels during one trial.

    Parameters
    ----------
    trial_locations : sequence of int
        Location ids shown in this trial, in presentation order
    tuning : ChannelTuning
        Preferred locations of the channels (not modified)
    timing : TrialTiming
        Trial timeline
    rng : np.random.Generator, optional
        Random source (a fresh default generator if omitted)
    noise_amplitude : float, default=0.1
        Upper bound of the baseline noise

    Returns
    -------
    np.ndarray
        Activity (n_channels x recording_duration), non-negative
    """
    trial_locations = np.asarray(trial_locations, dtype=int).ravel()
    if len(trial_locations) != timing.n_stimuli:
        raise ConfigurationError(
            f"Trial shows {len(trial_locations)} stimuli but the timeline "
            f"has {timing.n_stimuli} stimulus windows")
    if rng is None:
        rng = np.random.default_rng()

    n_channels = tuning.n_channels
    activity = rng.random((n_channels, timing.recording_duration)) * noise_amplitude

    for location, (start, stop) in zip(trial_locations, timing.stimulus_windows()):
        strength = response_strengths(tuning, int(location))
        activity[:, start:stop] += strength[:, np.newaxis] * rng.random((n_channels, stop - start))

    return activity


def simulate_experiment(design: TrialDesign, tuning: ChannelTuning, timing: TrialTiming,
                        rng: Optional[np.random.Generator] = None,
                        noise_amplitude: float = 0.1,
                        callback: Optional[ProgressCallback] = None) -> np.ndarray:
    """
    Simulate every trial of a design.

    Parameters
    ----------
    design : TrialDesign
        Trial design
    tuning : ChannelTuning
        Channel preferences, shared by all trials
    timing : TrialTiming
        Trial timeline
    rng : np.random.Generator, optional
        Random source
    noise_amplitude : float, default=0.1
        Upper bound of the baseline noise
    callback : callable, optional
        Called with a StimulusEvent for every stimulus slot of every
        trial, after that trial has been simulated. Used for live display
        only; it has no effect on the returned activity.

    Returns
    -------
    np.ndarray
        Activity (n_trials x n_channels x recording_duration)
    """
    if rng is None:
        rng = np.random.default_rng()

    activity = np.zeros((design.n_trials, tuning.n_channels, timing.recording_duration))
    windows = timing.stimulus_windows()

    for trial_idx, trial_locations in enumerate(design.locations):
        activity[trial_idx] = simulate_trial_activity(
            trial_locations, tuning, timing, rng, noise_amplitude)

        if callback is not None:
            trial_view = activity[trial_idx].view()
            trial_view.setflags(write=False)
            for slot_idx, location in enumerate(trial_locations):
                callback(StimulusEvent(trial_idx, slot_idx, int(location),
                                       windows[slot_idx], trial_view))

    return activity
