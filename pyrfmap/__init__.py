"""
PyRFMap - Population Receptive Field Mapping Simulation

Simulates a PRF mapping experiment: a counterbalanced sequence of grid
stimuli is shown to a population of channels with Gaussian spatial
tuning, and the synthetic responses are averaged back into a
sensitivity map over the stimulus grid.
"""

__version__ = "1.0.0"
__author__ = "PyRFMap Developers"

from .core.data_structures import (
    ExperimentConfig, TrialTiming, TrialDesign, ChannelTuning, ExperimentResults
)
from .core.exceptions import ConfigurationError, DesignIntegrityError, DataIntegrityWarning
from .core.prf_functions import gaussian_response, sample_channel_tuning
from .simulation.trial_design import generate_trial_design, verify_trial_design
from .simulation.simulate_activity import simulate_trial_activity, simulate_experiment
from .simulation.experiment import run_experiment
from .analysis.aggregation import calculate_sensitivity_grid
from .analysis.interpolation import upsample_grid

__all__ = [
    'ExperimentConfig', 'TrialTiming', 'TrialDesign', 'ChannelTuning', 'ExperimentResults',
    'ConfigurationError', 'DesignIntegrityError', 'DataIntegrityWarning',
    'gaussian_response', 'sample_channel_tuning',
    'generate_trial_design', 'verify_trial_design',
    'simulate_trial_activity', 'simulate_experiment', 'run_experiment',
    'calculate_sensitivity_grid', 'upsample_grid'
]
