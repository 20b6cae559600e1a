"""Shared default constants for the relay library."""

# Default attempt budget when a retry policy omits max_attempts.
DEFAULT_MAX_ATTEMPTS: int = 3

# Default delay between attempts. Carried through for the caller; the
# engine never sleeps on it.
DEFAULT_BACKOFF_MS: int = 1_000  # 1 second

# Separator used when rendering a cycle path in validation messages.
CYCLE_PATH_SEPARATOR: str = ' → '
