"""Context builders for the three harness modes."""

from contextlib import contextmanager
from typing import Iterator, Optional

from argon2_harness.config import PWD_DEF
from argon2_harness.crypto.context import HashContext
from argon2_harness.params.invocation import InvocationParameters


RUN_OUTLEN = 32
RUN_SALTLEN = 16

BENCH_OUTLEN = 16
BENCH_INLEN = 16
BENCH_T_COST = 1

TEST_OUTLEN = 32
TEST_PWDLEN = 32
TEST_SALTLEN = 16
TEST_SECRETLEN = 8
TEST_ADLEN = 12
TEST_T_COST = 3
TEST_M_COST = 16
TEST_LANES = 4


@contextmanager
def owned_password(password: Optional[bytes]) -> Iterator[bytearray]:
    """
    Copy the password into a harness-owned buffer and release it exactly once.

    The buffer is wiped when the block exits, whether or not the invocation
    succeeded. The primitive only ever sees a reference.
    """
    source = PWD_DEF.encode() if password is None else password
    length = len(source)
    buf = bytearray(length)
    buf[:length] = source
    try:
        yield buf
    finally:
        buf[:] = bytes(length)
        del buf[:]


def build_run_context(params: InvocationParameters, pwd: bytearray) -> HashContext:
    """Single-run context: 32-byte tag, all-zero 16-byte salt, all flags off."""
    return HashContext(
        outlen=RUN_OUTLEN,
        pwd=pwd,
        salt=bytes(RUN_SALTLEN),
        t_cost=params.t_cost,
        m_cost=params.m_cost,
        lanes=params.lanes,
        threads=params.threads,
    )


def build_bench_context(m_cost: int, threads: int) -> HashContext:
    return HashContext(
        outlen=BENCH_OUTLEN,
        pwd=bytearray(BENCH_INLEN),
        salt=b'\x01' * BENCH_INLEN,
        t_cost=BENCH_T_COST,
        m_cost=m_cost,
        lanes=threads,
        threads=threads,
    )


def build_kat_context(allocate_cbk=None, free_cbk=None) -> HashContext:
    """Fixed test-vector context with internal-state printing enabled."""
    return HashContext(
        outlen=TEST_OUTLEN,
        pwd=bytearray(b'\x01' * TEST_PWDLEN),
        salt=b'\x02' * TEST_SALTLEN,
        secret=b'\x03' * TEST_SECRETLEN,
        ad=b'\x04' * TEST_ADLEN,
        t_cost=TEST_T_COST,
        m_cost=TEST_M_COST,
        lanes=TEST_LANES,
        threads=TEST_LANES,
        allocate_cbk=allocate_cbk,
        free_cbk=free_cbk,
        print_internals=True,
    )
