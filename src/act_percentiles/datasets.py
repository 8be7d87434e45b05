"""
Packaged datasets

Small CSV datasets ship inside the package under data/ and are loaded by
name. External CSV files can be loaded with the same column validation.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union
import pandas as pd

from act_percentiles.utilities.common import validate_required_columns

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"

# Columns each packaged dataset must provide
DATASET_COLUMNS = {
    'act_gpa': ['student_id', 'act', 'gpa'],
}


def available_datasets() -> List[str]:
    """Names of the datasets bundled with the package."""
    return sorted(path.stem for path in DATA_DIR.glob("*.csv"))


def load_csv(
    file_path: Union[str, Path],
    required_columns: Optional[List[str]] = None
) -> pd.DataFrame:
    """
    Load a CSV file and check its columns

    Args:
        file_path: Path to CSV file
        required_columns: Columns that must be present

    Returns:
        DataFrame with loaded data

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If required columns are missing
    """
    path = Path(file_path)

    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {file_path}")

    logger.info(f"Loading data from {path}")
    df = pd.read_csv(path)

    if required_columns and not validate_required_columns(df, required_columns, path.name):
        raise ValueError(f"{path.name} is missing required columns {required_columns}")

    logger.info(f"  Loaded {len(df):,} rows, {len(df.columns)} columns")
    return df


def load_dataset(name: str) -> pd.DataFrame:
    """
    Load a packaged dataset by name

    Args:
        name: Dataset name, e.g. 'act_gpa'

    Returns:
        DataFrame with the dataset

    Raises:
        ValueError: If no dataset has that name

    Example:
        >>> df = load_dataset('act_gpa')
        >>> list(df.columns)
        ['student_id', 'act', 'gpa']
    """
    available = available_datasets()

    if name not in available:
        raise ValueError(
            f"Unknown dataset '{name}'. Available: {', '.join(available) or 'none'}"
        )

    return load_csv(DATA_DIR / f"{name}.csv", DATASET_COLUMNS.get(name))
