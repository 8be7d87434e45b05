#!/usr/bin/env python3
"""
ACT percentile pipeline

This pipeline runs the complete analysis:
1. Load the score dataset
2. Build the score probability table
3. Derive cumulative probabilities and percentiles
4. Join the probability table onto the student records
5. Average the outcome per score
6. Fit a least squares trend line
7. Plot mean outcome by score (optional)
8. Export result tables (optional)

Usage:
    python full_pipeline.py [--config <yaml>] [--lookup SCORE] [--output-dir DIR] [--no-plot]

Example:
    python full_pipeline.py --lookup 28 --lookup 10
    python full_pipeline.py --plot outputs/visualizations/gpa_by_act.png
    python full_pipeline.py --no-plot --output-dir outputs/datasets
"""

import argparse
import copy
from dataclasses import dataclass, field
from datetime import datetime
import logging
from pathlib import Path
import sys
from typing import Dict, List, Optional

import pandas as pd
import yaml

from act_percentiles.calculators.probability_table import (
    ScorePercentile,
    add_percentiles,
    bin_edges,
    build_probability_table,
    make_lookup,
)
from act_percentiles.calculators.score_groups import (
    TrendLine,
    fit_trend_line,
    join_probability_table,
    mean_by_score,
    summarize_scores,
)
from act_percentiles.datasets import load_dataset
from act_percentiles.utilities.common import (
    create_data_lineage_file,
    format_number,
    load_yaml_config,
    save_table,
    setup_logging,
)

logger = logging.getLogger(__name__)

# Checkout root, one level above pipelines/
PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config" / "pipeline.yaml"

DEFAULT_CONFIG = {
    'dataset': {
        'name': 'act_gpa',
        'score_column': 'act',
        'outcome_column': 'gpa',
    },
    'scores': {
        'lo': 16,
        'hi': 33,
    },
    'display': {
        'decimals': 3,
    },
    'plot': {
        'enabled': True,
        'title': None,
        'xlabel': None,
        'ylabel': None,
        'output': None,
    },
    'output_dir': None,
}


def load_pipeline_config(config_path: Optional[Path] = None) -> dict:
    """
    Load pipeline configuration, filling gaps from DEFAULT_CONFIG

    Args:
        config_path: Optional YAML file

    Returns:
        Complete configuration dictionary
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path is None:
        return config

    overrides = load_yaml_config(config_path)
    if not isinstance(overrides, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")

    for section, values in overrides.items():
        if section not in config:
            logger.warning(f"Ignoring unknown config section: {section}")
            continue
        if isinstance(config[section], dict):
            if not isinstance(values, dict):
                raise ValueError(f"Config section '{section}' must be a mapping")
            config[section].update(values)
        else:
            config[section] = values

    return config


@dataclass
class PipelineResult:
    """Every table the pipeline produces"""
    raw: pd.DataFrame
    probability_table: pd.DataFrame
    joined: pd.DataFrame
    aggregate: pd.DataFrame
    trend: TrendLine
    summary: Dict[str, float]
    lookups: Dict[int, Optional[ScorePercentile]] = field(default_factory=dict)
    outputs: List[Path] = field(default_factory=list)

    def lookup(self, score: int) -> Optional[ScorePercentile]:
        return make_lookup(self.probability_table)(score)


class PipelineRunner:
    """
    Orchestrate the ACT percentile pipeline
    """

    def __init__(self, config: Optional[dict] = None, lookup_scores: Optional[List[int]] = None):
        """
        Initialize pipeline

        Args:
            config: Configuration from load_pipeline_config (defaults if None)
            lookup_scores: Scores to report percentiles for after the run
        """
        self.config = config if config is not None else load_pipeline_config()
        self.lookup_scores = lookup_scores or []

        dataset = self.config['dataset']
        self.dataset_name = dataset['name']
        self.score_column = dataset['score_column']
        self.outcome_column = dataset['outcome_column']

        scores = self.config['scores']
        self.edges = bin_edges(scores['lo'], scores['hi'])
        self.decimals = self.config['display']['decimals']

        self.steps_completed = []
        self.steps_failed = []

    @staticmethod
    def _banner(title: str):
        logger.info("\n" + "="*60)
        logger.info(title)
        logger.info("="*60)

    def _step(self, name: str, func, *args):
        """Run one step, recording whether it completed"""
        self._banner(name.upper())
        try:
            result = func(*args)
        except Exception:
            self.steps_failed.append(name)
            logger.exception(f"✗ {name} failed")
            raise
        self.steps_completed.append(name)
        logger.info(f"✓ {name} completed")
        return result

    def export_tables(self, result: PipelineResult, output_dir: Path) -> List[Path]:
        """
        Save result tables as CSV with a lineage file

        Returns:
            Paths written
        """
        output_dir = Path(output_dir)
        written = []

        tables = {
            f"{self.dataset_name}_probability_table.csv": result.probability_table,
            f"{self.dataset_name}_with_percentiles.csv": result.joined,
            f"{self.dataset_name}_mean_{self.outcome_column}_by_{self.score_column}.csv": result.aggregate,
        }
        for file_name, df in tables.items():
            written.append(save_table(df, output_dir / file_name))

        lineage = create_data_lineage_file(
            output_dir / f"{self.dataset_name}_probability_table.csv",
            source_files=[f"dataset:{self.dataset_name}"],
            processing_steps=list(self.steps_completed),
            additional_info={
                'score_range': [int(self.edges[0]), int(self.edges[-2])],
                'trend_line': {
                    'slope': result.trend.slope,
                    'intercept': result.trend.intercept,
                    'r_value': result.trend.r_value,
                },
                'summary': result.summary,
            },
        )
        written.append(lineage)
        return written

    def run(self) -> PipelineResult:
        """
        Run the complete pipeline

        Returns:
            PipelineResult with every derived table

        Raises:
            Whatever the failing step raised, after logging it
        """
        start_time = datetime.now()

        logger.info("="*60)
        logger.info("ACT PERCENTILE PIPELINE")
        logger.info("="*60)
        logger.info(f"Dataset: {self.dataset_name}")
        logger.info(f"Scores: {self.edges[0]}-{self.edges[-2]}")
        logger.info(f"Started: {start_time.strftime('%Y-%m-%d %H:%M:%S')}")

        raw = self._step("Load Dataset", load_dataset, self.dataset_name)
        table = self._step(
            "Build Probability Table",
            lambda: build_probability_table(raw[self.score_column], self.edges)
        )
        table = self._step("Derive Percentiles", add_percentiles, table, self.decimals)
        joined = self._step(
            "Join Percentiles", join_probability_table,
            raw, table, self.score_column
        )
        aggregate = self._step(
            "Aggregate Outcome", mean_by_score,
            joined, self.score_column, self.outcome_column
        )
        trend = self._step(
            "Fit Trend Line", fit_trend_line,
            aggregate, self.score_column, f"mean_{self.outcome_column}"
        )

        result = PipelineResult(
            raw=raw,
            probability_table=table,
            joined=joined,
            aggregate=aggregate,
            trend=trend,
            summary=summarize_scores(raw, self.score_column, self.outcome_column),
        )

        plot_config = self.config['plot']
        if plot_config.get('enabled', True):
            import matplotlib.pyplot as plt
            from act_percentiles.plots import scatter_with_trend

            output = plot_config.get('output')
            if output is not None and not Path(output).is_absolute():
                output = PROJECT_ROOT / output

            def plot():
                fig = scatter_with_trend(
                    aggregate,
                    self.score_column,
                    f"mean_{self.outcome_column}",
                    trend=trend,
                    title=plot_config.get('title'),
                    xlabel=plot_config.get('xlabel'),
                    ylabel=plot_config.get('ylabel'),
                    output_path=output,
                )
                plt.close(fig)

            self._step("Plot", plot)
        else:
            logger.info("Skipping plot (disabled)")

        output_dir = self.config.get('output_dir')
        if output_dir:
            result.outputs = self._step("Export Tables", self.export_tables, result, Path(output_dir))

        lookup = make_lookup(table)
        for score in self.lookup_scores:
            result.lookups[score] = lookup(score)

        end_time = datetime.now()

        self._banner("PIPELINE SUMMARY")
        logger.info(f"Completed steps: {len(self.steps_completed)}")
        logger.info(f"Records: {format_number(result.summary['n_records'])}")
        logger.info(
            f"Trend: {self.outcome_column} = {trend.intercept:.3f} "
            f"+ {trend.slope:.3f} * {self.score_column}"
        )
        for score, found in result.lookups.items():
            if found is None:
                logger.info(f"  Score {score}: no entry in probability table")
            else:
                logger.info(f"  Score {score}: {found.percentage} of students, {found.percentile} percentile")
        logger.info(f"\nDuration: {end_time - start_time}")
        logger.info("\n✓ Pipeline completed successfully!")

        return result


def main():
    parser = argparse.ArgumentParser(
        description="Build ACT score percentiles and relate scores to GPA",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Pipeline configuration YAML (default: config/pipeline.yaml if present)"
    )
    parser.add_argument(
        "--dataset",
        help="Packaged dataset name (overrides config)"
    )
    parser.add_argument(
        "--lookup",
        type=int,
        action="append",
        default=[],
        metavar="SCORE",
        help="Report percentage and percentile for a score (repeatable)"
    )
    parser.add_argument(
        "--plot",
        type=Path,
        help="Save the plot to this file (overrides config)"
    )
    parser.add_argument(
        "--no-plot",
        action="store_true",
        help="Skip plotting"
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        help="Export result tables to this directory"
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Save log to file"
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)"
    )

    args = parser.parse_args()

    setup_logging(log_level=args.log_level, log_file=args.log_file)

    config_path = args.config
    if config_path is None and DEFAULT_CONFIG_PATH.exists():
        config_path = DEFAULT_CONFIG_PATH

    try:
        config = load_pipeline_config(config_path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error(f"Could not load config: {e}")
        return 1

    if args.dataset:
        config['dataset']['name'] = args.dataset
    if args.plot:
        config['plot']['output'] = str(args.plot)
    if args.no_plot:
        config['plot']['enabled'] = False
    if args.output_dir:
        config['output_dir'] = str(args.output_dir)

    try:
        PipelineRunner(config, lookup_scores=args.lookup).run()
    except Exception as e:
        logger.error(f"\n✗ Pipeline failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
