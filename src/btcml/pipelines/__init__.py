"""End-to-end pipelines: prepare the feature table, train and compare models, render the report."""

from .config import DEFAULT_CONFIG, Config, load_config, merge_config

__all__ = ["DEFAULT_CONFIG", "Config", "load_config", "merge_config"]
