"""
Tests for utility functions

Run with: pytest tests/test_utilities.py
"""

import logging

import pandas as pd
import pytest
import yaml

from act_percentiles.utilities.common import (
    create_data_lineage_file,
    format_number,
    format_share,
    load_yaml_config,
    save_table,
    save_yaml_config,
    setup_logging,
    validate_required_columns,
)


class TestFormatNumber:
    """Tests for number formatting"""

    def test_format_number_integer(self):
        """Test formatting integers"""
        assert format_number(1234567) == '1,234,567'
        assert format_number(1000) == '1,000'
        assert format_number(100) == '100'

    def test_format_number_with_decimals(self):
        """Test formatting with decimal places"""
        assert format_number(1234.567, 2) == '1,234.57'
        assert format_number(1000.1, 1) == '1,000.1'

    def test_format_number_nan(self):
        """Test handling of NaN"""
        assert format_number(float('nan')) == 'N/A'


class TestFormatShare:
    """Tests for percentage/percentile display strings"""

    def test_whole_percentages(self):
        assert format_share(0.25) == '25%'
        assert format_share(0.5) == '50%'
        assert format_share(0.0) == '0%'

    def test_percentile_suffix(self):
        assert format_share(1.0, suffix=' th') == '100 th'
        assert format_share(0.75, suffix=' th') == '75 th'

    def test_rounds_before_scaling(self):
        """0.0834 rounds to 0.083 first, then displays as 8.3"""
        assert format_share(0.0834) == '8.3%'
        assert format_share(0.12349) == '12.3%'

    def test_float_noise_hidden(self):
        """Running sums like 0.9999999999 display as 100"""
        assert format_share(0.1 + 0.2 + 0.7 - 1e-12, suffix=' th') == '100 th'

    def test_nan(self):
        assert format_share(float('nan')) == 'N/A'


class TestValidateRequiredColumns:
    """Tests for DataFrame column validation"""

    def test_validate_all_present(self):
        """Test when all required columns are present"""
        df = pd.DataFrame({
            'act': [20, 22],
            'gpa': [3.0, 3.4],
            'student_id': [1, 2]
        })

        assert validate_required_columns(df, ['act', 'gpa'], 'test')
        assert validate_required_columns(df, ['act'], 'test')

    def test_validate_missing_columns(self):
        """Test when required columns are missing"""
        df = pd.DataFrame({
            'act': [20, 22],
            'gpa': [3.0, 3.4]
        })

        assert not validate_required_columns(df, ['act', 'sat'], 'test')
        assert not validate_required_columns(df, ['missing'], 'test')

    def test_validate_empty_requirements(self):
        """Test with empty requirements list"""
        df = pd.DataFrame({'act': [20, 22]})
        assert validate_required_columns(df, [], 'test')


class TestYamlConfig:
    """Tests for YAML load/save"""

    def test_round_trip(self, tmp_path):
        path = tmp_path / "config" / "pipeline.yaml"
        save_yaml_config({'scores': {'lo': 16, 'hi': 33}}, path)

        assert load_yaml_config(path) == {'scores': {'lo': 16, 'hi': 33}}

    def test_empty_file_returns_empty_dict(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_yaml_config(path) == {}

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_yaml_config(tmp_path / "missing.yaml")

    def test_invalid_yaml_raises(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("scores: [16, 33\n")
        with pytest.raises(yaml.YAMLError):
            load_yaml_config(path)


class TestOutputs:
    """Tests for table export and lineage files"""

    def test_save_table(self, tmp_path):
        df = pd.DataFrame({'score': [16, 17], 'probability': [0.5, 0.5]})
        path = save_table(df, tmp_path / "out" / "table.csv")

        assert path.exists()
        assert pd.read_csv(path).equals(df)

    def test_save_table_rejects_other_formats(self, tmp_path):
        df = pd.DataFrame({'score': [16]})
        with pytest.raises(ValueError, match="Unsupported file type"):
            save_table(df, tmp_path / "table.parquet")

    def test_lineage_file(self, tmp_path):
        output = tmp_path / "table.csv"
        lineage_path = create_data_lineage_file(
            output,
            source_files=['dataset:act_gpa'],
            processing_steps=['Load Dataset', 'Build Probability Table'],
            additional_info={'score_range': [16, 33]},
        )

        assert lineage_path == tmp_path / "table_lineage.yaml"
        lineage = load_yaml_config(lineage_path)
        assert lineage['source_files'] == ['dataset:act_gpa']
        assert lineage['processing_steps'] == ['Load Dataset', 'Build Probability Table']
        assert lineage['score_range'] == [16, 33]


class TestSetupLogging:
    """Tests for logging setup"""

    def test_sets_level_and_file(self, tmp_path):
        root = logging.getLogger()
        before = list(root.handlers)
        level = root.level
        log_file = tmp_path / "logs" / "run.log"

        try:
            setup_logging('DEBUG', log_file)
            logging.getLogger('act_percentiles.test').debug("hello")

            assert root.level == logging.DEBUG
            assert log_file.exists()
        finally:
            for handler in root.handlers[len(before):]:
                handler.close()
                root.removeHandler(handler)
            root.setLevel(level)
