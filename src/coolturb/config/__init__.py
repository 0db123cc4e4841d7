"""
Configuration module: run parameters and validation.

Provides YAML/JSON/Athena-style input loading and Pydantic validation of the
problem parameters.
"""

from coolturb.config.parameters import ParameterInput, MissingParameterError
from coolturb.config.loaders import (
    load_config,
    save_config,
    config_from_dict,
    load_athinput,
)
from coolturb.config.schema import ProblemConfig

__all__ = [
    'ParameterInput',
    'MissingParameterError',
    'load_config',
    'save_config',
    'config_from_dict',
    'load_athinput',
    'ProblemConfig',
]
