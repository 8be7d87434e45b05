from .common import (
    load_yaml_config,
    save_yaml_config,
    setup_logging,
    validate_required_columns,
    format_number,
    format_share,
)

__all__ = [
    "load_yaml_config",
    "save_yaml_config",
    "setup_logging",
    "validate_required_columns",
    "format_number",
    "format_share",
]
