"""
Utility functions for the ACT percentile analysis

Common functions used across the calculators, dataset loading and pipeline.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union
import pandas as pd
import yaml

logger = logging.getLogger(__name__)


def load_yaml_config(config_path: Union[str, Path]) -> dict:
    """
    Load a YAML configuration file

    Args:
        config_path: Path to YAML file

    Returns:
        Dictionary from YAML file

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If file is not valid YAML
    """
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, 'r') as f:
        try:
            config = yaml.safe_load(f)
            return config if config else {}
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Error parsing YAML: {e}")


def save_yaml_config(data: dict, config_path: Union[str, Path]):
    """
    Save a dictionary as a YAML file

    Args:
        data: Dictionary to save
        config_path: Where to save the file
    """
    path = Path(config_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w') as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)


def setup_logging(
    log_level: str = 'INFO',
    log_file: Optional[Path] = None
) -> logging.Logger:
    """
    Set up logging configuration

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file to write logs to

    Returns:
        Configured logger
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    return root_logger


def validate_required_columns(
    df: pd.DataFrame,
    required_columns: List[str],
    dataset_name: str = "dataset"
) -> bool:
    """
    Validate that a DataFrame has required columns

    Args:
        df: DataFrame to validate
        required_columns: List of required column names
        dataset_name: Name for error messages

    Returns:
        True if all columns present, False otherwise
    """
    missing = [col for col in required_columns if col not in df.columns]

    if missing:
        logger.error(f"{dataset_name} missing required columns: {', '.join(missing)}")
        logger.info(f"Available columns: {', '.join(df.columns)}")
        return False

    return True


def format_number(value: Union[int, float], decimals: int = 0) -> str:
    """
    Format a number with thousands separators

    Args:
        value: Number to format
        decimals: Number of decimal places

    Returns:
        Formatted string

    Examples:
        >>> format_number(1234567)
        '1,234,567'
        >>> format_number(1234.567, 2)
        '1,234.57'
    """
    if pd.isna(value):
        return "N/A"

    return f"{value:,.{decimals}f}"


def format_share(value: float, decimals: int = 3, suffix: str = "%") -> str:
    """
    Format a share in [0, 1] as a display percentage

    The share is rounded to `decimals` places first and then scaled by 100,
    so 0.0834 with 3 decimals becomes '8.3%'.

    Examples:
        >>> format_share(0.25)
        '25%'
        >>> format_share(1.0, suffix=" th")
        '100 th'
    """
    if pd.isna(value):
        return "N/A"

    scaled = round(round(float(value), decimals) * 100, max(decimals - 2, 0))
    return f"{scaled:g}{suffix}"


def create_data_lineage_file(
    output_path: Path,
    source_files: List[str],
    processing_steps: List[str],
    additional_info: Optional[Dict] = None
) -> Path:
    """
    Create a metadata file documenting data lineage

    Args:
        output_path: Where the processed data was saved
        source_files: Datasets or files used
        processing_steps: List of processing steps applied
        additional_info: Additional metadata to include

    Returns:
        Path to the lineage file
    """
    lineage_path = output_path.parent / f"{output_path.stem}_lineage.yaml"

    lineage = {
        'output_file': str(output_path),
        'created': pd.Timestamp.now().isoformat(),
        'source_files': [str(f) for f in source_files],
        'processing_steps': processing_steps,
    }

    if additional_info:
        lineage.update(additional_info)

    save_yaml_config(lineage, lineage_path)
    logger.info(f"Data lineage saved: {lineage_path}")
    return lineage_path


def save_table(df: pd.DataFrame, output_path: Path) -> Path:
    """
    Save a result table as CSV

    Args:
        df: DataFrame to save
        output_path: Where to save the file

    Returns:
        The path written
    """
    if output_path.suffix != '.csv':
        raise ValueError(f"Unsupported file type: {output_path.suffix}")

    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output_path, index=False)
    logger.info(f"  Saved {len(df):,} rows to {output_path}")
    return output_path
