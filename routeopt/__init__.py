"""
Route optimisation scenario driver.

Assembles the traffic model, resolves the run configuration (command-line
arguments or the built-in default), executes one simulation run and prints
per-traveler trip results.
"""

from .description import ModelDescription
from .errors import ConfigurationError, ModelDescriptionError
from .runner import (
    build_model_description,
    resolve_application,
    execute_simulation,
    report_results,
    run,
    main,
)
from .scenarios.defaults import create_default_config

__all__ = [
    'ModelDescription',
    'ConfigurationError',
    'ModelDescriptionError',
    'build_model_description',
    'resolve_application',
    'execute_simulation',
    'report_results',
    'run',
    'main',
    'create_default_config',
]
