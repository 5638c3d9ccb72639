"""
Configuration for podsecurity.
"""

from podsecurity.config.evaluation_config import EvaluationConfig, load_config_from_env

__all__ = [
    "EvaluationConfig",
    "load_config_from_env",
]
