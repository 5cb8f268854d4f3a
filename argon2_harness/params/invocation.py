import argparse
import logging
import os
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from argon2_harness.config import (
    T_COST_DEF, LOG_M_COST_DEF, LANES_DEF, THREADS_DEF, PWD_DEF, TYPE_DEF,
)
from argon2_harness.params.clamp import (
    MIN_LANES, MAX_LANES, MIN_THREADS, MAX_THREADS, UsageError, parse_int,
    clamp_t_cost, clamp_m_cost, clamp_lanes, clamp_threads,
)

logger = logging.getLogger(__name__)


class Mode(Enum):
    RUN = "r"
    GENERATE = "g"
    BENCHMARK = "b"


@dataclass
class InvocationParameters:
    """Clamped parameters for one process run"""
    type_tag: str = TYPE_DEF
    t_cost: int = T_COST_DEF
    m_cost: int = 1 << LOG_M_COST_DEF
    lanes: int = LANES_DEF
    threads: int = THREADS_DEF
    password: Optional[bytes] = None  # None -> PWD_DEF
    mode: Mode = Mode.RUN


# Option string (as argparse reports it) -> diagnostic for a missing value
_MISSING_VALUE = {
    '-m/--mcost': 'missing memory cost argument',
    '-t/--tcost': 'missing time cost argument',
    '-p/--threads': 'missing threads argument',
    '-l/--lanes': 'missing lanes argument',
    '-y/--type': 'missing type argument',
    '-i/--password': 'missing password argument',
}
_EXPECTED_ONE = re.compile(r"argument (\S+): expected one argument")

# Every option takes exactly one value, whatever it looks like
_LONG_NAMES = {
    name: option.split('/')[1]
    for option in _MISSING_VALUE
    for name in option.split('/')
}


def join_option_values(argv: List[str]) -> List[str]:
    """
    Glue each known option to the token after it as `--long=value`.

    argparse refuses values that start with '-' ("-i -secret", "-y -d"), so the
    pairing is done here. An option with nothing after it is left alone and
    argparse reports the missing value.
    """
    joined = []
    tokens = iter(enumerate(argv))
    for index, token in tokens:
        long_name = _LONG_NAMES.get(token)
        if long_name is not None and index + 1 < len(argv):
            _, value = next(tokens)
            joined.append(f"{long_name}={value}")
        else:
            joined.append(token)
    return joined


class _HarnessParser(argparse.ArgumentParser):
    """ArgumentParser that raises UsageError instead of exiting with status 2."""

    def error(self, message):
        match = _EXPECTED_ONE.match(message)
        if match and match.group(1) in _MISSING_VALUE:
            raise UsageError(_MISSING_VALUE[match.group(1)])
        logger.debug("argparse rejected input: %s", message)
        raise UsageError("unknown argument")


def build_parser(prog: str = "argon2-harness") -> argparse.ArgumentParser:
    p = _HarnessParser(
        prog=prog,
        usage=f"{prog} mode [parameters]",
        add_help=False,
        allow_abbrev=False,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description=(
            "Mode:\n"
            "\tr\trun Argon2 with the selected parameters\n"
            "\tg\tgenerates test vectors for given Argon2 type\n"
            "\tb\tbenchmarks various Argon2 versions"
        ),
    )
    p.add_argument('modes', nargs='*', help=argparse.SUPPRESS)
    group = p.add_argument_group('Parameters (for run mode)')
    group.add_argument('-y', '--type', dest='type_tag', default=TYPE_DEF,
                       help=f'd or i, default {TYPE_DEF}')
    group.add_argument('-t', '--tcost', default=None,
                       help=f'time cost in 0..2^24, default {T_COST_DEF}')
    group.add_argument('-m', '--mcost', default=None,
                       help=f'base 2 log of memory cost in 0..21, default {LOG_M_COST_DEF}')
    group.add_argument('-l', '--lanes', default=None,
                       help=f'number of lanes in {MIN_LANES}..{MAX_LANES}, default {LANES_DEF}')
    group.add_argument('-p', '--threads', default=None,
                       help=f'number of threads in {MIN_THREADS}..{MAX_THREADS}, default {THREADS_DEF}')
    group.add_argument('-i', '--password', default=None,
                       help=f'password, default "{PWD_DEF}"')
    return p


def _select_mode(modes: List[str]) -> Mode:
    known = {m.value for m in Mode}
    for token in modes:
        if token not in known:
            logger.debug("unexpected positional argument: %r", token)
            raise UsageError("unknown argument")
    # 'b' runs the benchmark wherever it appears; otherwise the last r/g wins
    if Mode.BENCHMARK.value in modes:
        return Mode.BENCHMARK
    if modes:
        return Mode(modes[-1])
    return Mode.RUN


def parse_invocation(argv: List[str], parser: Optional[argparse.ArgumentParser] = None) -> InvocationParameters:
    """
    Turn raw argv (without the program name) into clamped InvocationParameters.

    Raises:
        UsageError: missing option value, unknown flag or non-integer numeric.
    """
    parser = parser or build_parser()
    args = parser.parse_intermixed_args(join_option_values(list(argv)))

    params = InvocationParameters(type_tag=args.type_tag, mode=_select_mode(args.modes or []))
    if args.tcost is not None:
        params.t_cost = clamp_t_cost(parse_int(args.tcost, 'time cost'))
    if args.mcost is not None:
        params.m_cost = clamp_m_cost(parse_int(args.mcost, 'memory cost'))
    if args.lanes is not None:
        params.lanes = clamp_lanes(parse_int(args.lanes, 'lanes'))
    if args.threads is not None:
        params.threads = clamp_threads(parse_int(args.threads, 'threads'))
    if args.password is not None:
        # fsencode undoes the surrogateescape decoding of argv
        params.password = os.fsencode(args.password)

    logger.debug("parsed invocation: type=%s t=%d m=%d lanes=%d threads=%d mode=%s",
                 params.type_tag, params.t_cost, params.m_cost,
                 params.lanes, params.threads, params.mode.name)
    return params
