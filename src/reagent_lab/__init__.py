"""Substance inventory and recipe resolution with cyclic recipe support."""

from reagent_lab.config import LabConfig, load_config
from reagent_lab.errors import (
    CircularDependencyError,
    ConfigError,
    DuplicateNameError,
    EmptyListError,
    InvalidInputError,
    InvalidListError,
    InvalidNameError,
    InvalidQuantityError,
    ReagentLabError,
    SingularSystemError,
    UnknownSubstanceError,
)
from reagent_lab.laboratory import Laboratory

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Laboratory",
    "LabConfig",
    "load_config",
    "ReagentLabError",
    "InvalidInputError",
    "InvalidNameError",
    "InvalidListError",
    "EmptyListError",
    "InvalidQuantityError",
    "UnknownSubstanceError",
    "DuplicateNameError",
    "SingularSystemError",
    "CircularDependencyError",
    "ConfigError",
]
