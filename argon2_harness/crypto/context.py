"""
HashContext: every input, output and flag for one call into the Argon2 primitive.

Built only from keyword arguments and validated at construction time. Once
built the context is frozen; the primitive adapter writes into the output
buffer and nothing else.
"""

from typing import Callable, Optional

from argon2_harness.params.clamp import (
    MIN_LANES, MAX_LANES, MIN_THREADS, MAX_THREADS, T_COST_MASK,
)


class ContextError(ValueError):
    """Raised when a HashContext would violate its invariants"""


def _is_power_of_two(value: int) -> bool:
    return value > 0 and (value & (value - 1)) == 0


class HashContext:
    __slots__ = (
        'out', 'pwd', 'salt', 'secret', 'ad',
        't_cost', 'm_cost', 'lanes', 'threads',
        'allocate_cbk', 'free_cbk',
        'clear_password', 'clear_secret', 'clear_memory', 'print_internals',
        '_frozen',
    )

    def __init__(
        self,
        *,
        outlen: int,
        pwd,
        salt: bytes,
        t_cost: int,
        m_cost: int,
        lanes: int,
        threads: int,
        secret: Optional[bytes] = None,
        ad: Optional[bytes] = None,
        allocate_cbk: Optional[Callable] = None,
        free_cbk: Optional[Callable] = None,
        clear_password: bool = False,
        clear_secret: bool = False,
        clear_memory: bool = False,
        print_internals: bool = False,
    ):
        if outlen <= 0:
            raise ContextError(f"output length must be positive, got {outlen}")
        if not MIN_LANES <= lanes <= MAX_LANES:
            raise ContextError(f"lanes must be in {MIN_LANES}..{MAX_LANES}, got {lanes}")
        if not MIN_THREADS <= threads <= MAX_THREADS:
            raise ContextError(f"threads must be in {MIN_THREADS}..{MAX_THREADS}, got {threads}")
        if not _is_power_of_two(m_cost):
            raise ContextError(f"memory cost must be a power of two, got {m_cost}")
        if t_cost < 0 or t_cost > T_COST_MASK:
            raise ContextError(f"time cost must fit in 24 bits, got {t_cost}")
        if (allocate_cbk is None) != (free_cbk is None):
            raise ContextError("allocate and free callbacks must be set together")

        set_ = object.__setattr__
        set_(self, 'out', bytearray(outlen))
        # pwd is a harness-owned buffer; the context only references it
        set_(self, 'pwd', pwd)
        set_(self, 'salt', bytes(salt))
        set_(self, 'secret', bytes(secret) if secret else None)
        set_(self, 'ad', bytes(ad) if ad else None)
        set_(self, 't_cost', t_cost)
        set_(self, 'm_cost', m_cost)
        set_(self, 'lanes', lanes)
        set_(self, 'threads', threads)
        set_(self, 'allocate_cbk', allocate_cbk)
        set_(self, 'free_cbk', free_cbk)
        set_(self, 'clear_password', clear_password)
        set_(self, 'clear_secret', clear_secret)
        set_(self, 'clear_memory', clear_memory)
        set_(self, 'print_internals', print_internals)
        set_(self, '_frozen', True)

    def __setattr__(self, name, value):
        raise ContextError(f"HashContext is write-once; cannot set '{name}'")

    def __delattr__(self, name):
        raise ContextError(f"HashContext is write-once; cannot delete '{name}'")

    @property
    def outlen(self) -> int:
        return len(self.out)

    @property
    def pwdlen(self) -> int:
        return len(self.pwd)

    @property
    def has_custom_allocator(self) -> bool:
        return self.allocate_cbk is not None

    def __repr__(self):
        # Never echo the password or secret
        return (f"HashContext(outlen={self.outlen}, pwdlen={self.pwdlen}, "
                f"saltlen={len(self.salt)}, t_cost={self.t_cost}, m_cost={self.m_cost}, "
                f"lanes={self.lanes}, threads={self.threads}, "
                f"print_internals={self.print_internals})")
