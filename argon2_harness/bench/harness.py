"""
Benchmark harness for Argon2d and Argon2i.

For every (memory cost, thread count) of the grid one context is built with
t_cost=1, 16-byte all-zero password and 16-byte all-ones salt. Argon2d and
then Argon2i run back to back on the same context; the cycle counter is read
before, between and after, the wall clock before and after.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Sequence, TextIO, Tuple

from argon2.low_level import Type

from argon2_harness.crypto.builder import build_bench_context
from argon2_harness.crypto.primitive import check_status, invoke

logger = logging.getLogger(__name__)

THREAD_TEST = (1, 2, 4, 6, 8, 16)
MIN_LOG_M_COST = 10
MAX_LOG_M_COST = 22


class CycleCounter:
    """
    Monotonic tick source standing in for a hardware cycle counter.

    Reads `time.perf_counter_ns()` and scales by a nominal CPU frequency, so
    with the default 1.0 GHz one tick is one nanosecond.
    """

    def __init__(self, cpu_ghz: float = 1.0, source: Callable[[], int] = time.perf_counter_ns):
        if cpu_ghz <= 0:
            raise ValueError(f"cpu_ghz must be positive, got {cpu_ghz}")
        self.cpu_ghz = cpu_ghz
        self.source = source

    def read(self) -> int:
        return int(self.source() * self.cpu_ghz)


class BenchmarkGrid:
    """Memory costs 2^min_log..2^max_log (doubling) crossed with thread counts."""

    def __init__(self, min_log_m: int = MIN_LOG_M_COST, max_log_m: int = MAX_LOG_M_COST,
                 threads: Sequence[int] = THREAD_TEST):
        if min_log_m > max_log_m:
            raise ValueError(f"empty memory range 2^{min_log_m}..2^{max_log_m}")
        self.memory_costs = [1 << k for k in range(min_log_m, max_log_m + 1)]
        self.threads = tuple(threads)

    def __iter__(self) -> Iterator[Tuple[int, int]]:
        for m_cost in self.memory_costs:
            for thread_n in self.threads:
                yield m_cost, thread_n

    def __len__(self):
        return len(self.memory_costs) * len(self.threads)


@dataclass
class MeasurementSample:
    m_cost: int
    threads: int
    t_cost: int
    start_cycles: int
    stop_cycles_d: int
    stop_cycles_i: int
    start_time: float
    stop_time: float
    status_d: int = 0
    status_i: int = 0

    @property
    def cycles_d(self) -> int:
        return self.stop_cycles_d - self.start_cycles

    @property
    def cycles_i(self) -> int:
        return self.stop_cycles_i - self.stop_cycles_d

    @property
    def cpb_d(self) -> float:
        return self.cycles_d / self.m_cost / 1024

    @property
    def cpb_i(self) -> float:
        return self.cycles_i / self.m_cost / 1024

    @property
    def mcycles_d(self) -> float:
        return self.cycles_d / (1 << 20)

    @property
    def mcycles_i(self) -> float:
        return self.cycles_i / (1 << 20)

    @property
    def seconds(self) -> float:
        return self.stop_time - self.start_time


def measure(m_cost: int, thread_n: int, counter: CycleCounter,
            clock: Callable[[], float] = time.time, primitive=invoke) -> MeasurementSample:
    """Time Argon2d followed by Argon2i on one shared context."""
    context = build_bench_context(m_cost, thread_n)

    start_time = clock()
    start_cycles = counter.read()
    status_d = primitive(context, Type.D)
    stop_cycles_d = counter.read()
    status_i = primitive(context, Type.I)
    stop_cycles_i = counter.read()
    stop_time = clock()

    check_status(status_d, Type.D)
    check_status(status_i, Type.I)

    return MeasurementSample(
        m_cost=m_cost, threads=thread_n, t_cost=context.t_cost,
        start_cycles=start_cycles, stop_cycles_d=stop_cycles_d, stop_cycles_i=stop_cycles_i,
        start_time=start_time, stop_time=stop_time,
        status_d=status_d, status_i=status_i,
    )


def format_sample(sample: MeasurementSample) -> str:
    lines = []
    for name, cpb, mcycles in (("d", sample.cpb_d, sample.mcycles_d),
                               ("i", sample.cpb_i, sample.mcycles_i)):
        lines.append(
            f"Argon2{name} {sample.t_cost} pass(es)  {sample.m_cost >> 10} Mbytes "
            f"{sample.threads} threads:  {cpb:2.2f} cpb {mcycles:2.2f} Mcycles "
        )
    lines.append(f"{sample.seconds:2.4f} seconds")
    return "\n".join(lines) + "\n\n"


def run_benchmark(grid: Optional[BenchmarkGrid] = None, counter: Optional[CycleCounter] = None,
                  out: Optional[TextIO] = None, clock: Callable[[], float] = time.time,
                  primitive=invoke) -> List[MeasurementSample]:
    """
    Measure every grid point and write its report to `out` as it completes.

    Raises:
        PrimitiveError: if either variant returns a non-OK status.
    """
    grid = grid or BenchmarkGrid()
    counter = counter or CycleCounter()
    samples = []
    logger.info("benchmarking %d configurations", len(grid))
    for m_cost, thread_n in grid:
        logger.debug("measuring m_cost=%d threads=%d", m_cost, thread_n,
                     extra={"m_cost": m_cost, "threads": thread_n})
        sample = measure(m_cost, thread_n, counter, clock=clock, primitive=primitive)
        samples.append(sample)
        if out is not None:
            out.write(format_sample(sample))
            out.flush()
    return samples
