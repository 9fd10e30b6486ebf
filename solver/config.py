"""Centralized configuration for MathDash.

Every value can be overridden through an environment variable prefixed
with ``MATHDASH_``.
"""

import os

LOG_LEVEL = os.getenv("MATHDASH_LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("MATHDASH_LOG_FILE") or None

# API server
HOST = os.getenv("MATHDASH_HOST", "127.0.0.1")
PORT = int(os.getenv("MATHDASH_PORT", "8000"))
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("MATHDASH_CORS_ORIGINS", "*").split(",")
    if origin.strip()
]

# Subscription gate: an empty set leaves every endpoint open.
SUBSCRIPTION_TOKENS = frozenset(
    token.strip()
    for token in os.getenv("MATHDASH_SUBSCRIPTION_TOKENS", "").split(",")
    if token.strip()
)

# Computation limits
TRAPEZOID_INTERVALS = int(os.getenv("MATHDASH_TRAPEZOID_INTERVALS", "1000"))
MAX_INPUT_LENGTH = int(os.getenv("MATHDASH_MAX_INPUT_LENGTH", "10000"))

# Constant subexpressions are checked before SymPy evaluates them exactly.
MAX_EXPONENT = int(os.getenv("MATHDASH_MAX_EXPONENT", "10000"))
MAX_FACTORIAL_ARGUMENT = int(os.getenv("MATHDASH_MAX_FACTORIAL_ARGUMENT", "170"))

# Cramer's rule tie-break for a vanishing determinant.
DETERMINANT_EPSILON = 1e-10
