"""
Tests for the rendering functions.
"""

import matplotlib
matplotlib.use('Agg')

import pytest
import numpy as np
import matplotlib.pyplot as plt
from pyrfmap.core.data_structures import StimulusEvent, TrialTiming
from pyrfmap.core.prf_functions import sample_channel_tuning
from pyrfmap.simulation.simulate_activity import simulate_experiment
from pyrfmap.simulation.trial_design import generate_trial_design
from pyrfmap.analysis.plotting import plot_stimulus, plot_sensitivity_grid, TrialAnimator


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close('all')


class TestPlotStimulus:
    """Test the stimulus grid display."""

    def test_one_highlighted_square(self):
        ax = plot_stimulus((4, 6), 12)

        assert len(ax.patches) == 24
        red = [p for p in ax.patches if p.get_facecolor()[:3] == (1.0, 0.0, 0.0)]
        assert len(red) == 1
        # Location 12 is row 4, column 3
        assert red[0].get_xy() == pytest.approx((3 - 0.4, 4 - 0.4))


class TestPlotSensitivityGrid:
    """Test the heatmap display."""

    def test_raw_heatmap(self):
        grid = np.random.default_rng(0).random((4, 6))
        ax = plot_sensitivity_grid(grid, colormap='hot', interpolation=False)

        images = ax.get_images()
        assert len(images) == 1
        assert images[0].get_array().shape == (4, 6)
        assert ax.get_title() == 'Population Receptive Field Heatmap'

    def test_smoothed_heatmap(self):
        grid = np.random.default_rng(1).random((4, 6))
        ax = plot_sensitivity_grid(grid, colormap='viridis', interpolation=True, factor=5)

        assert ax.get_images()[0].get_array().shape == (20, 30)
        assert list(ax.get_xticks()) == [1, 2, 3, 4, 5, 6]


class TestTrialAnimator:
    """Test the live trial display fed by stimulus events."""

    def test_progressive_recording(self):
        timing = TrialTiming(30, 50, 10)
        design = generate_trial_design(24, 1, 3, np.random.default_rng(0))
        tuning = sample_channel_tuning(6, 12, (4, 6), np.random.default_rng(1))

        animator = TrialAnimator((4, 6), tuning.n_channels, timing.recording_duration, pause=0)
        activity = simulate_experiment(design, tuning, timing, np.random.default_rng(2),
                                       callback=animator)

        # After the last event every window of the last trial is revealed
        last = design.n_trials - 1
        assert animator.current_trial == last
        for start, stop in timing.stimulus_windows():
            assert np.array_equal(animator.recording[:, start:stop], activity[last, :, start:stop])
        assert np.all(np.isnan(animator.recording[:, :30]))
        animator.close()

    def test_new_trial_resets_recording(self):
        trial_activity = np.ones((2, 200))
        animator = TrialAnimator((4, 6), 2, 200, pause=0)

        animator(StimulusEvent(0, 0, 1, (30, 80), trial_activity))
        animator(StimulusEvent(1, 0, 2, (30, 80), trial_activity))

        assert animator.current_trial == 1
        assert not np.any(np.isnan(animator.recording[:, 30:80]))
        assert np.all(np.isnan(animator.recording[:, 90:140]))
        animator.close()
