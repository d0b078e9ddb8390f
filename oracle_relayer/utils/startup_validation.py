"""
Environment validation run before a relayer job starts.

Checks that the API keys the job needs are configured and warns about
optional settings that fall back to defaults.
"""

import os
import sys
from typing import List

from oracle_relayer.config import settings
from oracle_relayer.utils.logger import logger


class EnvironmentValidator:
    """Validates relayer configuration for the requested job."""

    def __init__(self, require_tally: bool = False, require_ambient: bool = True):
        self.require_tally = require_tally
        self.require_ambient = require_ambient
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def validate_all(self) -> bool:
        """
        Run all validation checks.

        Returns:
            True if all critical checks pass, False otherwise.
        """
        logger.info("EnvironmentValidator: Validating relayer environment")

        self._validate_api_keys()
        self._validate_model_config()
        self._validate_optional_config()

        self._report_results()

        return len(self.errors) == 0

    def _validate_api_keys(self) -> None:
        missing = []
        if self.require_ambient and not os.environ.get("AMBIENT_API_KEY"):
            missing.append("AMBIENT_API_KEY")
        if self.require_tally and not os.environ.get("TALLY_API_KEY"):
            missing.append("TALLY_API_KEY")

        if missing:
            self.errors.append(f"Missing env: {', '.join(missing)}")

    def _validate_model_config(self) -> None:
        model_id = os.environ.get("AMBIENT_MODEL_ID")
        if not model_id:
            self.warnings.append(f"AMBIENT_MODEL_ID not specified, will use {settings.DEFAULT_MODEL_ID}")
        elif len(model_id) > settings.MAX_MODEL_ID_LEN:
            self.errors.append(f"AMBIENT_MODEL_ID too long (max {settings.MAX_MODEL_ID_LEN} characters)")

    def _validate_optional_config(self) -> None:
        optional_configs = {
            "HTTP_TIMEOUT_SECONDS": "HTTP timeout (defaults to 30s)",
        }
        if not self.require_tally:
            optional_configs["TALLY_API_KEY"] = "Tally proposals cannot be fetched"

        for var, description in optional_configs.items():
            if not os.environ.get(var):
                self.warnings.append(f"Optional config {var} not set: {description}")

    def _report_results(self) -> None:
        if self.errors:
            logger.error("EnvironmentValidator: %d critical errors found:", len(self.errors))
            for error in self.errors:
                logger.error("  - %s", error)

        if self.warnings:
            logger.warning("EnvironmentValidator: %d warnings found:", len(self.warnings))
            for warning in self.warnings:
                logger.warning("  - %s", warning)

        if not self.errors:
            logger.info("EnvironmentValidator: env ok")


def validate_environment(require_tally: bool = False, require_ambient: bool = True) -> bool:
    """
    Run environment validation and return success status.

    Returns:
        True if validation passes, False if critical errors found.
    """
    return EnvironmentValidator(require_tally=require_tally, require_ambient=require_ambient).validate_all()


def validate_or_exit(require_tally: bool = False, require_ambient: bool = True) -> None:
    """Run environment validation and exit with status 1 on critical errors."""
    if not validate_environment(require_tally=require_tally, require_ambient=require_ambient):
        logger.error("EnvironmentValidator: Critical validation errors found. Exiting.")
        sys.exit(1)


if __name__ == "__main__":
    args = set(sys.argv[1:])
    validate_or_exit(
        require_tally="--require-tally" in args,
        require_ambient="--require-ambient" in args or "--skip-ambient" not in args,
    )
