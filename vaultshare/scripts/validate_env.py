"""
Environment validation script.
Reports which required backend variables are set before a build or deploy.
Missing values only fail the run with --strict; builds otherwise continue
with placeholder values.

Run with: python -m vaultshare.scripts.validate_env [--strict]
"""

import argparse
import logging
import sys
from typing import List, Optional

from vaultshare.config import Settings
from vaultshare.core.errors import ConfigurationError
from vaultshare.database.supabase_client import resolve_connection_config

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)

REQUIRED_VARS = {
    "SUPABASE_URL": "supabase_url",
    "SUPABASE_ANON_KEY": "supabase_anon_key",
}


def mask(value: str, visible: int = 10) -> str:
    return value[:visible] + "..."


def validate(settings: Settings) -> List[str]:
    """Log each required variable and return the names of the missing ones."""
    missing = []
    for env_name, field in REQUIRED_VARS.items():
        value = getattr(settings, field)
        if value:
            logger.info(f"OK       {env_name}: {mask(value)}")
        else:
            logger.info(f"MISSING  {env_name}")
            missing.append(env_name)
    return missing


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Validate backend environment variables")
    parser.add_argument("--strict", action="store_true", help="exit non-zero when a variable is missing")
    args = parser.parse_args(argv)

    settings = Settings()
    missing = validate(settings)
    if not missing:
        logger.info("All required environment variables are set")
        return 0

    logger.info("Missing required environment variables: %s", ", ".join(missing))
    logger.info("Set them in .env or the deployment environment.")
    try:
        resolve_connection_config(settings, strict=args.strict)
    except ConfigurationError as e:
        logger.error(str(e))
        return 1
    logger.info("Build will continue with placeholder values")
    return 0


if __name__ == "__main__":
    sys.exit(main())
