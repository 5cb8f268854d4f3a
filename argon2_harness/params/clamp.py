"""
Clamping rules for untrusted command-line numerics.

Out-of-range values are never rejected here: they wrap by modulo or mask so
every input maps onto a bounded value. Whether the wrapped value is usable by
the primitive (e.g. zero lanes) is checked later when the HashContext is built.
"""

# Argon2 reference limits (argon2.h)
MIN_LANES = 1
MAX_LANES = 0xFFFFFF
MIN_THREADS = 1
MAX_THREADS = 0xFFFFFF

T_COST_MASK = 0xFFFFFF
LOG_M_COST_MODULUS = 22


class UsageError(Exception):
    """Raised for malformed command-line input (missing values, unknown flags)"""


def parse_int(text: str, label: str) -> int:
    """Parse a signed decimal integer, the only numeric form the CLI accepts."""
    try:
        return int(text.strip(), 10)
    except (ValueError, AttributeError):
        raise UsageError(f"invalid {label} value '{text}'")


def clamp_t_cost(raw: int) -> int:
    """Keep the low 24 bits of the time cost."""
    return raw & T_COST_MASK


def clamp_m_cost(raw: int) -> int:
    """Map a base-2 log to an absolute block count, 2^(raw mod 22)."""
    return 1 << (raw % LOG_M_COST_MODULUS)


def clamp_lanes(raw: int) -> int:
    return raw % MAX_LANES


def clamp_threads(raw: int) -> int:
    return raw % MAX_THREADS
