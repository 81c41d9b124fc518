"""
Plotting and visualization functions.

These functions only consume the outputs of the simulation and
aggregation steps: the stimulus grid display, a live trial animator fed
by the simulator's stimulus events, and the sensitivity heatmap.
"""

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.patches as patches
from typing import Optional, Tuple

from ..core.data_structures import StimulusEvent, location_to_coords
from .interpolation import upsample_grid


def plot_stimulus(grid_shape: Tuple[int, int], location: int,
                  ax: Optional[plt.Axes] = None) -> plt.Axes:
    """
    Show the stimulus grid with the current location highlighted.

    Parameters
    ----------
    grid_shape : tuple of int
        (rows, cols)
    location : int
        Location id of the current stimulus
    ax : plt.Axes, optional
        Matplotlib axes to plot on

    Returns
    -------
    plt.Axes
        Matplotlib axes object
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(6, 4))

    n_rows, n_cols = grid_shape
    row, col = location_to_coords(location, grid_shape)

    for i in range(1, n_rows + 1):
        for j in range(1, n_cols + 1):
            shown = (i == row) and (j == col)
            square = patches.Rectangle((j - 0.4, i - 0.4), 0.8, 0.8,
                                       facecolor='r' if shown else 'w',
                                       edgecolor='k')
            ax.add_patch(square)

    ax.set_xlim(0, n_cols + 1)
    ax.set_ylim(n_rows + 1, 0)  # row 1 at the top
    ax.set_aspect('equal')
    ax.axis('off')

    return ax


class TrialAnimator:
    """
    Live display of trial progress.

    Pass an instance as the `callback` of `simulate_experiment`. Each
    stimulus event reveals that stimulus window of the current trial's
    recording, which starts out empty (NaN), and redraws the stimulus
    grid next to the recording so far.
    """

    def __init__(self, grid_shape: Tuple[int, int], n_channels: int,
                 recording_duration: int, pause: float = 0.2,
                 cmap: str = 'viridis'):
        self.grid_shape = tuple(grid_shape)
        self.pause = pause
        self.cmap = cmap
        self.recording = np.full((n_channels, recording_duration), np.nan)
        self.current_trial = None
        self.fig, (self.stim_ax, self.activity_ax) = plt.subplots(1, 2, figsize=(12, 5))
        self._image = None

    def __call__(self, event: StimulusEvent) -> None:
        if event.trial_index != self.current_trial:
            self.recording[:] = np.nan
            self.current_trial = event.trial_index

        start, stop = event.window
        self.recording[:, start:stop] = event.trial_activity[:, start:stop]

        self.stim_ax.cla()
        plot_stimulus(self.grid_shape, event.location, ax=self.stim_ax)
        self.stim_ax.set_title(f'Trial {event.trial_index + 1}, Stimulus {event.slot_index + 1}')

        if self._image is None:
            self._image = self.activity_ax.imshow(self.recording, aspect='auto',
                                                  cmap=self.cmap, vmin=0, vmax=1,
                                                  interpolation='nearest')
            self.activity_ax.set_xlabel('Time (ms)')
            self.activity_ax.set_ylabel('Channel')
            self.fig.colorbar(self._image, ax=self.activity_ax)
        else:
            self._image.set_data(self.recording)
        self.activity_ax.set_title(f'Neural Activity up to Stimulus {event.slot_index + 1}')

        self.fig.canvas.draw_idle()
        if self.pause > 0:
            plt.pause(self.pause)

    def close(self) -> None:
        plt.close(self.fig)


def plot_sensitivity_grid(grid: np.ndarray, colormap: str = 'hot',
                          interpolation: bool = False, factor: int = 10,
                          ax: Optional[plt.Axes] = None) -> plt.Axes:
    """
    Plot the population receptive field heatmap.

    Parameters
    ----------
    grid : np.ndarray
        Sensitivity grid (rows x cols)
    colormap : str, default='hot'
        Matplotlib colormap name
    interpolation : bool, default=False
        Show the bicubic upsampled grid instead of the raw cells
    factor : int, default=10
        Upsampling factor used when `interpolation` is True
    ax : plt.Axes, optional
        Matplotlib axes to plot on

    Returns
    -------
    plt.Axes
        Matplotlib axes object
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 6))

    grid = np.asarray(grid, dtype=float)
    n_rows, n_cols = grid.shape

    if not interpolation:
        im = ax.imshow(grid, cmap=colormap, interpolation='nearest',
                       extent=[0.5, n_cols + 0.5, n_rows + 0.5, 0.5])
        for i in range(n_rows):
            for j in range(n_cols):
                ax.text(j + 1, i + 1, f'{grid[i, j]:.3f}', ha='center', va='center',
                        color='gray', fontsize=8)
        ax.set_title('Population Receptive Field Heatmap')
    else:
        fine_grid, _, _ = upsample_grid(grid, factor)
        # Fine sample i is centred on 1 + i / factor
        half = 0.5 / factor
        im = ax.imshow(fine_grid, cmap=colormap, aspect='equal',
                       extent=[1 - half, n_cols + 1 - half, n_rows + 1 - half, 1 - half])
        ax.set_title('Population Receptive Field Heatmap (Smoothed)')

    # Ticks at the original rows and columns
    ax.set_xticks(np.arange(1, n_cols + 1))
    ax.set_yticks(np.arange(1, n_rows + 1))
    ax.set_xlabel('Column')
    ax.set_ylabel('Row')
    plt.colorbar(im, ax=ax, label='Mean response')

    return ax
