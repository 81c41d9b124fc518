"""
Integration tests for PyRFMap.

Tests that verify the interaction between the design generator, the
simulator and the aggregator, end-to-end runs and the command line.
"""

import time
import warnings
import pytest
import numpy as np
from pyrfmap.core.data_structures import ChannelTuning, ExperimentConfig
from pyrfmap.core.exceptions import ConfigurationError
from pyrfmap.simulation.experiment import run_experiment
from pyrfmap.analysis.statistics import peak_location, summarize_sensitivity
from pyrfmap import cli


# Short trials keep the end-to-end runs fast
FAST = dict(baseline_duration=30, stimulus_duration=50, isi_duration=10)


class TestExperimentWorkflow:
    """Test complete simulation and aggregation runs."""

    def test_default_design_counts(self):
        """4x6 grid, 10 repetitions, 3 per trial: 80 trials, 10 per location."""
        config = ExperimentConfig(num_channels=10, **FAST)
        results = run_experiment(config, seed=0)

        assert results.design.n_trials == 80
        assert np.array_equal(results.design.location_counts(), np.full(24, 10))
        assert results.activity.shape == (80, 10, 200)
        assert results.sensitivity.shape == (4, 6)
        assert results.interpolated.shape == (40, 60)

    def test_forced_channel_recovers_peak(self):
        """A single channel tuned to location 12 puts the grid peak at location 12."""
        config = ExperimentConfig(num_channels=1, peak_sensitivity_location=12, **FAST)
        tuning = ChannelTuning.from_locations([12], config.grid_shape)
        results = run_experiment(config, seed=1, tuning=tuning)

        grid = results.sensitivity
        assert peak_location(grid) == 12
        assert grid[3, 2] == grid.max()
        # Every other cell is clearly below the peak despite baseline noise
        others = np.delete(grid.ravel(), np.argmax(grid))
        assert grid.max() - others.max() > 0.1

    def test_population_peak_recovered(self):
        """With a full population the estimate lands on or next to the true peak."""
        config = ExperimentConfig(num_channels=100, peak_sensitivity_location=15,
                                  grid_shape=(6, 6), targets_per_trial=3, **FAST)
        results = run_experiment(config, seed=2)

        stats = summarize_sensitivity(results.sensitivity, 15)
        assert stats['peak_error'] <= np.sqrt(2)

    def test_zero_repetitions(self):
        """No repetitions: empty design and an all-zero grid, no error."""
        config = ExperimentConfig(repetitions_per_location=0, num_channels=5, **FAST)

        with warnings.catch_warnings():
            warnings.simplefilter("error")
            results = run_experiment(config, seed=0)

        assert results.design.n_trials == 0
        assert results.activity.shape == (0, 5, 200)
        assert np.array_equal(results.sensitivity, np.zeros((4, 6)))

    def test_reproducible(self):
        """Same seed reproduces the whole run."""
        config = ExperimentConfig(num_channels=8, repetitions_per_location=2, **FAST)
        a = run_experiment(config, seed=42)
        b = run_experiment(config, seed=42)

        assert a.peak_location == b.peak_location
        assert np.array_equal(a.design.locations, b.design.locations)
        assert np.array_equal(a.tuning.preferred_locations, b.tuning.preferred_locations)
        assert np.array_equal(a.sensitivity, b.sensitivity)

    def test_random_peak_drawn(self):
        """Without a configured peak one is drawn from the grid."""
        config = ExperimentConfig(num_channels=4, repetitions_per_location=1, **FAST)
        results = run_experiment(config, seed=3)

        assert 1 <= results.config.peak_sensitivity_location <= 24
        assert results.tuning.peak_location == results.config.peak_sensitivity_location

    def test_tuning_shared_across_trials(self):
        """Channel preferences are drawn once per run."""
        config = ExperimentConfig(num_channels=30, repetitions_per_location=2,
                                  peak_sensitivity_location=5, **FAST)
        results = run_experiment(config, seed=4)

        assert results.tuning.n_channels == 30
        assert not results.tuning.preferred_locations.flags.writeable

    def test_interpolation_disabled(self):
        config = ExperimentConfig(num_channels=4, repetitions_per_location=1,
                                  interpolation=False, **FAST)
        results = run_experiment(config, seed=5)

        assert results.interpolated is None

    def test_tuning_grid_mismatch(self):
        config = ExperimentConfig(num_channels=1, **FAST)
        tuning = ChannelTuning.from_locations([3], (3, 4))
        with pytest.raises(ConfigurationError):
            run_experiment(config, seed=0, tuning=tuning)

    def test_tuning_channel_count_mismatch(self):
        """A tuning must have as many channels as configured."""
        config = ExperimentConfig(num_channels=100, peak_sensitivity_location=12, **FAST)
        tuning = ChannelTuning.from_locations([12], config.grid_shape)
        with pytest.raises(ConfigurationError, match="channels"):
            run_experiment(config, seed=0, tuning=tuning)

    def test_tuning_peak_mismatch(self):
        """A tuning centred elsewhere than the configured peak is rejected."""
        config = ExperimentConfig(num_channels=1, peak_sensitivity_location=3, **FAST)
        tuning = ChannelTuning.from_locations([12], config.grid_shape)
        with pytest.raises(ConfigurationError, match="peak"):
            run_experiment(config, seed=0, tuning=tuning)

    def test_tuning_fills_unset_peak(self):
        """Without a configured peak the results report the tuning's peak."""
        config = ExperimentConfig(num_channels=1, repetitions_per_location=1, **FAST)
        tuning = ChannelTuning.from_locations([12], config.grid_shape)
        results = run_experiment(config, seed=0, tuning=tuning)

        assert results.config.peak_sensitivity_location == 12
        assert results.config.num_channels == results.activity.shape[1] == 1


class TestStatistics:
    """Test sensitivity grid summaries."""

    def test_peak_location(self):
        grid = np.zeros((4, 6))
        grid[3, 2] = 1.0
        assert peak_location(grid) == 12

    def test_summary(self):
        grid = np.zeros((4, 6))
        grid[0, 1] = 2.0  # location 5

        stats = summarize_sensitivity(grid, true_peak=12)
        assert stats['peak_location'] == 5
        assert stats['peak_coords'] == (1, 2)
        assert stats['peak_value'] == 2.0
        assert stats['true_peak_coords'] == (4, 3)
        assert stats['peak_recovered'] is False
        assert np.isclose(stats['peak_error'], np.sqrt(9 + 1))


class TestCommandLine:
    """Test the command line interface."""

    def test_design_command(self, capsys):
        exit_code = cli.main(['design', '--repetitions', '2', '--seed', '1', '--show-trials'])
        output = capsys.readouterr().out

        assert exit_code == 0
        assert "Generated 16 trials of 3 targets" in output
        assert "Design verified!" in output

    def test_simulate_command(self, capsys):
        exit_code = cli.main(['simulate', '--seed', '1', '--repetitions', '2',
                              '--channels', '5', '--baseline', '10', '--stimulus', '20',
                              '--isi', '5', '--peak-location', '12'])
        output = capsys.readouterr().out

        assert exit_code == 0
        assert "Population's preferred location: row = 4; column = 3." in output
        assert "Simulation completed!" in output

    def test_simulate_plot(self, tmp_path, capsys):
        plot_file = tmp_path / 'heatmap.png'
        exit_code = cli.main(['simulate', '--seed', '2', '--repetitions', '1',
                              '--channels', '3', '--baseline', '10', '--stimulus', '20',
                              '--isi', '5', '--plot', str(plot_file)])

        assert exit_code == 0
        assert plot_file.exists()

    def test_configuration_error(self, capsys):
        """Invalid configurations are reported, not raised."""
        exit_code = cli.main(['simulate', '--rows', '5', '--cols', '5'])
        output = capsys.readouterr().out

        assert exit_code == 1
        assert "Error:" in output

    def test_no_command(self, capsys):
        assert cli.main([]) == 1


class TestPerformanceBenchmarks:
    """Performance benchmarks for the full pipeline."""

    @pytest.mark.benchmark
    def test_default_experiment_benchmark(self):
        """Benchmark the default 80-trial, 100-channel experiment."""
        start = time.time()
        results = run_experiment(ExperimentConfig(peak_sensitivity_location=12), seed=0)
        elapsed = time.time() - start

        print(f"Default experiment: {elapsed:.2f} s")
        assert results.activity.shape == (80, 100, 2000)
        assert elapsed < 120
