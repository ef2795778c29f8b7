"""Logging package for recipe tree tracing."""

from recipetree.logger.base_logger import AlgorithmLogger
from recipetree.logger.table_logger import TableLogger
from recipetree.logger.combined_logger import Logger
from recipetree.logger.formatting import format_keys, format_step

# Unified singleton for build/reveal tracing
rt_logger = Logger("RecipeTree")
rt_logger.disabled = True

__all__ = [
    "AlgorithmLogger",
    "TableLogger",
    "Logger",
    "rt_logger",
    "format_keys",
    "format_step",
]
