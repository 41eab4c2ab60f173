"""
Environment variable loading utility

Supports layered environment variable loading:
1. Load .env (default/base configuration)
2. Load .env.test or .env.prod based on RUN_ENV variable (overrides .env)
"""
import logging
import os
from pathlib import Path
from typing import List, Optional

import environ

logger = logging.getLogger(__name__)

RUN_ENV_FILES = {
    "test": ".env.test",
    "prod": ".env.prod",
}


def get_env_files(base_dir: Path, run_env: Optional[str] = None) -> List[Path]:
    """
    List the env files to load, in loading order

    Args:
        base_dir: Base directory where .env files are located
        run_env: Run environment, taken from RUN_ENV when omitted

    Returns:
        Existing env files, later ones override earlier ones
    """
    if run_env is None:
        run_env = os.environ.get("RUN_ENV", "")

    candidates = [base_dir / ".env"]
    layered = RUN_ENV_FILES.get(run_env.lower())
    if layered:
        candidates.append(base_dir / layered)

    return [env_file for env_file in candidates if env_file.exists()]


def load_env(base_dir: Path, run_env: Optional[str] = None) -> environ.Env:
    """
    Load environment variables with layered support

    Loading order:
    1. Load .env (base/default configuration)
    2. If RUN_ENV=test, load .env.test (overrides .env)
    3. If RUN_ENV=prod, load .env.prod (overrides .env)

    Args:
        base_dir: Base directory where .env files are located
        run_env: Run environment, taken from RUN_ENV when omitted

    Returns:
        environ.Env instance with loaded environment variables
    """
    for env_file in get_env_files(base_dir, run_env):
        # the base file never overrides the process environment
        environ.Env.read_env(env_file, overwrite=env_file.name != ".env")
        logger.debug(f"[load_env] Loaded {env_file}")

    return environ.Env()
