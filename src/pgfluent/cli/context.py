"""CLI context: resolved settings and record loading."""

import importlib
import logging
import sys
from dataclasses import dataclass
from typing import Any

from pgfluent.config import Settings
from pgfluent.schema.fields import is_record_type


def load_record_type(target: str) -> type:
    """Import a record type from a ``module:Name`` reference.

    Raises:
        ValueError: If the reference is malformed or does not name a record type
    """
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        raise ValueError(f"Invalid record reference: '{target}'. Expected format: module:Name")

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise ValueError(f"Cannot import module '{module_name}': {e}") from e

    for attr in attr_path.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError:
            raise ValueError(f"'{attr_path}' not found in module '{module_name}'") from None

    if not is_record_type(obj):
        raise ValueError(f"'{target}' is not a dataclass or pydantic model class")
    return obj


@dataclass
class CLIContext:
    """Shared context for CLI commands."""

    settings: Settings
    json_output: bool

    def configure_logging(self) -> None:
        """Send log records to stderr at the configured level."""
        logging.basicConfig(
            level=self.settings.log_level_number,
            stream=sys.stderr,
            format="%(levelname)s %(name)s: %(message)s",
        )
