"""
Shared fixtures for pytest

Usage:
    pytest tests/ -v
"""

import sys
from pathlib import Path

import matplotlib
import numpy as np
import pandas as pd
import pytest

matplotlib.use("Agg")

# Make pipelines/ importable
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


# --- Sample Data Fixtures ---

@pytest.fixture
def scenario_scores():
    """Four scores across three bins."""
    return [26, 27, 27, 28]


@pytest.fixture
def scenario_edges():
    """Unit-width edges 25..29."""
    return [25, 26, 27, 28, 29]


@pytest.fixture
def sample_students():
    """Small student table with one unobserved score and missing GPAs."""
    return pd.DataFrame({
        'student_id': [1, 2, 3, 4, 5, 6, 7, 8],
        'act': [20, 22, 22, 24, 24, 24, 25, 20],
        'gpa': [2.5, 3.0, np.nan, 3.2, 3.4, 3.6, np.nan, 2.7],
    })


@pytest.fixture
def sample_edges():
    """Scores 20..25, score 21 and 23 unobserved in sample_students."""
    return list(range(20, 27))


@pytest.fixture
def pipeline_config():
    """Pipeline configuration with plotting disabled."""
    return {
        'dataset': {
            'name': 'act_gpa',
            'score_column': 'act',
            'outcome_column': 'gpa',
        },
        'scores': {'lo': 16, 'hi': 33},
        'display': {'decimals': 3},
        'plot': {'enabled': False, 'title': None, 'xlabel': None,
                 'ylabel': None, 'output': None},
        'output_dir': None,
    }
