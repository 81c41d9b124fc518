"""
Core data structures for PyRFMap.

This module defines the configuration and result containers shared by
the design generator, the response simulator and the aggregator.

Grid locations are 1-based linear indices in column-major order: the
row index varies fastest, so on a 4 x 6 grid location 1 is (1, 1),
location 4 is (4, 1) and location 5 is (1, 2).
"""

import numpy as np
from typing import Optional, List, Tuple, Union
from dataclasses import dataclass, field

from .exceptions import ConfigurationError


def location_to_coords(location: Union[int, np.ndarray],
                       grid_shape: Tuple[int, int]) -> Tuple[np.ndarray, np.ndarray]:
    """
    Convert 1-based location ids to 1-based (row, col) grid coordinates.

    Parameters
    ----------
    location : int or np.ndarray
        Location id(s) in 1..rows*cols
    grid_shape : tuple of int
        (rows, cols)

    Returns
    -------
    rows, cols : np.ndarray
        1-based row and column indices, same shape as `location`
    """
    n_rows, n_cols = grid_shape
    location = np.asarray(location)
    if np.any(location < 1) or np.any(location > n_rows * n_cols):
        raise ConfigurationError(
            f"Location ids must lie in 1..{n_rows * n_cols} for a "
            f"{n_rows}x{n_cols} grid")

    idx = location.astype(int) - 1
    return idx % n_rows + 1, idx // n_rows + 1


def coords_to_location(row: Union[int, np.ndarray], col: Union[int, np.ndarray],
                       grid_shape: Tuple[int, int]) -> np.ndarray:
    """Inverse of `location_to_coords`."""
    n_rows, n_cols = grid_shape
    row = np.asarray(row).astype(int)
    col = np.asarray(col).astype(int)
    if (np.any(row < 1) or np.any(row > n_rows)
            or np.any(col < 1) or np.any(col > n_cols)):
        raise ConfigurationError(
            f"Coordinates outside the {n_rows}x{n_cols} grid")
    return (col - 1) * n_rows + row


@dataclass(frozen=True)
class TrialTiming:
    """
    Timeline of a single trial, in samples (one sample per millisecond).

    A trial is a baseline followed by `n_stimuli` presentations separated
    by inter-stimulus intervals: [baseline, stim, isi, stim, isi, stim].
    """

    baseline_duration: int = 300
    stimulus_duration: int = 500
    isi_duration: int = 100
    n_stimuli: int = 3

    def __post_init__(self):
        for name in ('baseline_duration', 'stimulus_duration', 'isi_duration', 'n_stimuli'):
            value = getattr(self, name)
            if int(value) != value or value <= 0:
                raise ConfigurationError(f"{name} must be a positive integer, got {value}")

    @property
    def phase_durations(self) -> List[int]:
        phases = [self.baseline_duration]
        for k in range(self.n_stimuli):
            if k > 0:
                phases.append(self.isi_duration)
            phases.append(self.stimulus_duration)
        return phases

    @property
    def phase_offsets(self) -> np.ndarray:
        """Cumulative phase boundaries, starting at 0 and ending at the trial length."""
        return np.cumsum([0] + self.phase_durations)

    @property
    def recording_duration(self) -> int:
        return int(self.phase_offsets[-1])

    def stimulus_windows(self) -> List[Tuple[int, int]]:
        """
        Sample ranges of the stimulus presentations.

        Returns
        -------
        list of (start, stop)
            0-based half-open ranges, one per stimulus slot
        """
        # Stimulus phases are the odd-numbered phases of the timeline
        offsets = self.phase_offsets
        return [(int(start), int(stop)) for start, stop in zip(offsets[1::2], offsets[2::2])]


@dataclass(frozen=True)
class ExperimentConfig:
    """
    Immutable configuration of a simulated PRF mapping experiment.

    Every component receives the values it needs from this object, so
    no parameter is shared through module state.
    """

    # Stimulus grid
    grid_shape: Tuple[int, int] = (4, 6)
    repetitions_per_location: int = 10
    targets_per_trial: int = 3

    # Timing (ms, one sample per ms)
    baseline_duration: int = 300
    stimulus_duration: int = 500
    isi_duration: int = 100

    # Channel population
    num_channels: int = 100
    peak_sensitivity_location: Optional[int] = None  # None = draw at random
    noise_amplitude: float = 0.1

    # Presentation
    interpolation: bool = True
    upsampling_factor: int = 10
    colormap: str = 'hot'

    def __post_init__(self):
        """Validate the configuration."""
        if len(self.grid_shape) != 2:
            raise ConfigurationError(f"grid_shape must be (rows, cols), got {self.grid_shape}")
        object.__setattr__(self, 'grid_shape', tuple(int(n) for n in self.grid_shape))
        if min(self.grid_shape) < 1:
            raise ConfigurationError(f"Grid dimensions must be positive, got {self.grid_shape}")

        if self.targets_per_trial < 1:
            raise ConfigurationError("targets_per_trial must be positive")
        if self.repetitions_per_location < 0:
            raise ConfigurationError("repetitions_per_location cannot be negative")
        if self.total_locations % self.targets_per_trial != 0:
            raise ConfigurationError(
                f"Total locations ({self.total_locations}) must be divisible by "
                f"targets per trial ({self.targets_per_trial})")
        if self.num_channels < 1:
            raise ConfigurationError("num_channels must be positive")
        if self.noise_amplitude < 0:
            raise ConfigurationError("noise_amplitude cannot be negative")
        if self.upsampling_factor < 1:
            raise ConfigurationError("upsampling_factor must be at least 1")

        peak = self.peak_sensitivity_location
        if peak is not None and not 1 <= peak <= self.total_locations:
            raise ConfigurationError(
                f"peak_sensitivity_location must lie in 1..{self.total_locations}, got {peak}")

        # Raises on non-positive durations
        self.timing

    @property
    def total_locations(self) -> int:
        return self.grid_shape[0] * self.grid_shape[1]

    @property
    def total_trials(self) -> int:
        return self.total_locations * self.repetitions_per_location // self.targets_per_trial

    @property
    def sigma(self) -> float:
        """Spatial spread shared by channel tuning and the response kernel."""
        from .prf_functions import tuning_sigma
        return tuning_sigma(self.total_locations)

    @property
    def timing(self) -> TrialTiming:
        return TrialTiming(self.baseline_duration, self.stimulus_duration,
                           self.isi_duration, self.targets_per_trial)


@dataclass(eq=False)
class TrialDesign:
    """
    Counterbalanced assignment of grid locations to trials.

    `locations` is an integer array (n_trials x targets_per_trial) of
    1-based location ids. It is made read-only on construction.
    """

    locations: np.ndarray
    total_locations: int
    repetitions_per_location: int

    def __post_init__(self):
        locations = np.array(self.locations, dtype=int)
        if locations.ndim != 2:
            raise ConfigurationError("Trial design must be a 2D array (trials x targets)")
        locations.setflags(write=False)
        self.locations = locations

    def __len__(self) -> int:
        return self.n_trials

    def __repr__(self) -> str:
        return (f"TrialDesign(trials={self.n_trials}, targets_per_trial={self.targets_per_trial}, "
                f"locations={self.total_locations}, repetitions={self.repetitions_per_location})")

    @property
    def n_trials(self) -> int:
        return self.locations.shape[0]

    @property
    def targets_per_trial(self) -> int:
        return self.locations.shape[1]

    def location_counts(self) -> np.ndarray:
        """
        Number of occurrences of each location across the whole design.

        Returns
        -------
        np.ndarray
            Counts for locations 1..total_locations (index 0 is location 1)
        """
        counts = np.bincount(self.locations.ravel(), minlength=self.total_locations + 1)
        return counts[1:self.total_locations + 1]


@dataclass(eq=False)
class ChannelTuning:
    """
    Preferred grid locations of the simulated channels.

    Generated once per run and shared read-only by every trial.
    """

    preferred_locations: np.ndarray  # (n_channels x 2) 1-based [row, col]
    peak_location: int
    sigma: float
    grid_shape: Tuple[int, int]

    def __post_init__(self):
        preferred = np.array(self.preferred_locations, dtype=int).reshape(-1, 2)
        n_rows, n_cols = self.grid_shape
        if (np.any(preferred < 1) or np.any(preferred[:, 0] > n_rows)
                or np.any(preferred[:, 1] > n_cols)):
            raise ConfigurationError(
                f"Preferred locations must lie within the {n_rows}x{n_cols} grid")
        preferred.setflags(write=False)
        self.preferred_locations = preferred
        self.grid_shape = tuple(self.grid_shape)

    @property
    def n_channels(self) -> int:
        return self.preferred_locations.shape[0]

    @classmethod
    def from_locations(cls, locations: Union[List[int], np.ndarray],
                       grid_shape: Tuple[int, int],
                       peak_location: Optional[int] = None,
                       sigma: Optional[float] = None) -> 'ChannelTuning':
        """
        Build a tuning from explicit location ids, one per channel.

        Parameters
        ----------
        locations : array-like of int
            Preferred location id of each channel
        grid_shape : tuple of int
            (rows, cols)
        peak_location : int, optional
            Population peak (defaults to the first channel's location)
        sigma : float, optional
            Spatial spread (defaults to the grid-derived value)
        """
        from .prf_functions import tuning_sigma

        locations = np.atleast_1d(np.asarray(locations, dtype=int))
        if locations.size == 0:
            raise ConfigurationError("at least one channel is required")
        rows, cols = location_to_coords(locations, grid_shape)
        if peak_location is None:
            peak_location = int(locations[0])
        if sigma is None:
            sigma = tuning_sigma(grid_shape[0] * grid_shape[1])
        return cls(np.column_stack([rows, cols]), int(peak_location), float(sigma), grid_shape)


@dataclass(frozen=True, eq=False)
class StimulusEvent:
    """Notification emitted once per stimulus slot while a run is simulated."""

    trial_index: int
    slot_index: int
    location: int
    window: Tuple[int, int]
    trial_activity: np.ndarray = field(repr=False)


@dataclass(eq=False)
class ExperimentResults:
    """Everything produced by one simulated mapping run."""

    config: ExperimentConfig
    design: TrialDesign
    tuning: ChannelTuning
    activity: np.ndarray      # trials x channels x samples
    sensitivity: np.ndarray   # rows x cols
    interpolated: Optional[np.ndarray] = None

    @property
    def peak_location(self) -> int:
        return self.tuning.peak_location
