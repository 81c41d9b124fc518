"""Core data structures and functions for PyRFMap."""

from .data_structures import (
    ExperimentConfig, TrialTiming, TrialDesign, ChannelTuning,
    StimulusEvent, ExperimentResults, location_to_coords, coords_to_location
)
from .exceptions import (
    PRFMapError, ConfigurationError, DesignIntegrityError, DataIntegrityWarning
)
from .prf_functions import (
    tuning_sigma, gaussian_response, sample_channel_tuning, response_strengths
)

__all__ = [
    'ExperimentConfig', 'TrialTiming', 'TrialDesign', 'ChannelTuning',
    'StimulusEvent', 'ExperimentResults', 'location_to_coords', 'coords_to_location',
    'PRFMapError', 'ConfigurationError', 'DesignIntegrityError', 'DataIntegrityWarning',
    'tuning_sigma', 'gaussian_response', 'sample_channel_tuning', 'response_strengths'
]
