# jwtype/config.py
"""
Centralized configuration for jwtype.

Values are read from environment variables with sensible defaults, so a
deployment can narrow the accepted algorithms or change the default token
type tag without code changes.

Usage:
    from jwtype.config import DEFAULT_ALGORITHMS, DEFAULT_TYP

Environment Variables:
    JWTYPE_DEFAULT_TYP: Value of the ``typ`` header when none is given (default: JWT)
    JWTYPE_ALGORITHMS: Comma separated algorithms accepted by the base token type
                       (default: none,HS256,RS256,ES256)
    JWTYPE_SECRET: Secret or key used by the CLI when --key is omitted

The other recognized configuration surface is the format registry in
``jwtype.formats`` (``{format_name: predicate}``), populated at startup.
"""

import os
from typing import Final, List, Optional

# =============================================================================
# Token Defaults
# =============================================================================

DEFAULT_TYP: Final[str] = os.getenv("JWTYPE_DEFAULT_TYP", "JWT")

ALGORITHMS_ENV: Final[str] = os.getenv("JWTYPE_ALGORITHMS", "none,HS256,RS256,ES256")

# =============================================================================
# CLI
# =============================================================================

SECRET_ENV_VAR: Final[str] = "JWTYPE_SECRET"


# =============================================================================
# Helper Functions
# =============================================================================


def parse_algorithms(value: Optional[str] = None) -> List[str]:
    """
    Parse a comma separated algorithm list.

    Args:
        value: The raw list. Defaults to ``JWTYPE_ALGORITHMS``.

    Returns:
        Algorithm names in order, blanks and duplicates removed.
    """
    raw = ALGORITHMS_ENV if value is None else value
    algorithms: List[str] = []
    for name in raw.split(","):
        name = name.strip()
        if name and name not in algorithms:
            algorithms.append(name)
    return algorithms


DEFAULT_ALGORITHMS: Final[List[str]] = parse_algorithms()


def get_secret() -> Optional[str]:
    """Secret configured for the CLI, if any."""
    return os.environ.get(SECRET_ENV_VAR) or None


# =============================================================================
# Configuration Summary (for debugging)
# =============================================================================


def print_config() -> None:
    """Print current configuration (useful for debugging)."""
    print("jwtype Configuration:")
    print(f"  DEFAULT_TYP:        {DEFAULT_TYP}")
    print(f"  DEFAULT_ALGORITHMS: {', '.join(DEFAULT_ALGORITHMS)}")
    print(f"  SECRET configured:  {get_secret() is not None}")


if __name__ == "__main__":
    print_config()
