"""
End-to-end simulation of a PRF mapping experiment.

Design generation, channel tuning, response simulation and aggregation
run in sequence from one configuration and one random generator, so a
seed reproduces the whole run.
"""

import dataclasses
import numpy as np
from typing import Optional

from ..core.data_structures import ChannelTuning, ExperimentConfig, ExperimentResults
from ..core.exceptions import ConfigurationError
from ..core.prf_functions import sample_channel_tuning
from ..analysis.aggregation import calculate_sensitivity_grid
from ..analysis.interpolation import upsample_grid
from .simulate_activity import ProgressCallback, simulate_experiment
from .trial_design import generate_trial_design


def run_experiment(config: Optional[ExperimentConfig] = None,
                   seed: Optional[int] = None,
                   rng: Optional[np.random.Generator] = None,
                   tuning: Optional[ChannelTuning] = None,
                   callback: Optional[ProgressCallback] = None) -> ExperimentResults:
    """
    Simulate a complete PRF mapping experiment.

    Parameters
    ----------
    config : ExperimentConfig, optional
        Experiment configuration (defaults to a 4x6 grid, 10 repetitions)
    seed : int, optional
        Seed for a new random generator; ignored if `rng` is given
    rng : np.random.Generator, optional
        Random generator driving every draw of the run
    tuning : ChannelTuning, optional
        Pre-built channel preferences, replacing the sampled ones
    callback : callable, optional
        Receives a StimulusEvent per stimulus slot (live display)

    Returns
    -------
    ExperimentResults
        Design, tuning, activity, sensitivity grid and, if configured,
        the upsampled grid
    """
    if config is None:
        config = ExperimentConfig()
    if rng is None:
        rng = np.random.default_rng(seed)

    if tuning is not None:
        if tuple(tuning.grid_shape) != config.grid_shape:
            raise ConfigurationError(
                f"Tuning grid {tuning.grid_shape} does not match configured grid {config.grid_shape}")
        if tuning.n_channels != config.num_channels:
            raise ConfigurationError(
                f"Tuning has {tuning.n_channels} channels but num_channels is {config.num_channels}")
        peak = config.peak_sensitivity_location
        if peak is not None and peak != tuning.peak_location:
            raise ConfigurationError(
                f"Tuning peak {tuning.peak_location} does not match "
                f"peak_sensitivity_location {peak}")
        if peak is None:
            config = dataclasses.replace(config, peak_sensitivity_location=tuning.peak_location)

    if config.peak_sensitivity_location is None:
        peak = int(rng.integers(1, config.total_locations + 1))
        config = dataclasses.replace(config, peak_sensitivity_location=peak)

    design = generate_trial_design(config.total_locations,
                                   config.repetitions_per_location,
                                   config.targets_per_trial, rng)

    if tuning is None:
        tuning = sample_channel_tuning(config.num_channels,
                                       config.peak_sensitivity_location,
                                       config.grid_shape, rng, config.sigma)

    timing = config.timing
    activity = simulate_experiment(design, tuning, timing, rng,
                                   config.noise_amplitude, callback)

    sensitivity = calculate_sensitivity_grid(activity, design, config.grid_shape, timing)

    interpolated = None
    if config.interpolation:
        interpolated, _, _ = upsample_grid(sensitivity, config.upsampling_factor)

    return ExperimentResults(config, design, tuning, activity, sensitivity, interpolated)
