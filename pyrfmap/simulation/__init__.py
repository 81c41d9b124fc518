"""Trial design and response simulation for PyRFMap."""

from .trial_design import generate_trial_design, verify_trial_design
from .simulate_activity import simulate_trial_activity, simulate_experiment
from .experiment import run_experiment

__all__ = [
    'generate_trial_design', 'verify_trial_design',
    'simulate_trial_activity', 'simulate_experiment',
    'run_experiment'
]
