#!/usr/bin/env python3
"""Command-line entry point: run (r), generate test vectors (g) or benchmark (b)."""
import logging
import sys
import time
from typing import List, Optional

from argon2_harness.bench.harness import CycleCounter, run_benchmark
from argon2_harness.config import Settings, load_settings
from argon2_harness.crypto.builder import build_run_context, owned_password
from argon2_harness.crypto.context import ContextError
from argon2_harness.crypto.primitive import (
    PrimitiveError, UnknownTypeError, check_status, invoke, resolve_type,
)
from argon2_harness.kat.generator import KatFile, generate_test_vectors
from argon2_harness.logging.json_logger import configure_logging
from argon2_harness.params.clamp import UsageError
from argon2_harness.params.invocation import InvocationParameters, Mode, build_parser, parse_invocation
from argon2_harness.report.output import EncodingError, report_run

logger = logging.getLogger(__name__)

FATAL_ERRORS = (UsageError, UnknownTypeError, ContextError, PrimitiveError, EncodingError)


def fatal(error: str):
    logger.debug("fatal: %s", error)
    sys.stderr.write(f"error: {error}\n")
    sys.exit(1)


def run(params: InvocationParameters, settings: Settings) -> bytes:
    """Hash once with the given parameters and print the report; return the tag."""
    type_ = resolve_type(params.type_tag)
    counter = CycleCounter(settings.cpu_ghz)

    with owned_password(params.password) as pwd:
        start_time = time.time()
        start_cycles = counter.read()

        context = build_run_context(params, pwd)
        status = invoke(context, type_)

        stop_cycles = counter.read()
        stop_time = time.time()
        check_status(status, type_)

        report_run(
            context, type_, bytes(pwd),
            seconds=stop_time - start_time,
            mcycles=(stop_cycles - start_cycles) / (1 << 20),
            capacity=settings.encoded_capacity,
        )
        return bytes(context.out)


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else list(argv)
    settings = load_settings()
    configure_logging(settings.log_level, settings.log_json)

    kat_file = KatFile(settings.kat_filename)
    kat_file.remove()

    parser = build_parser()
    if not argv:
        parser.print_help()
        return 1

    try:
        params = parse_invocation(argv, parser)

        if params.mode is Mode.BENCHMARK:
            run_benchmark(counter=CycleCounter(settings.cpu_ghz), out=sys.stdout)
            return 0

        if params.mode is Mode.GENERATE:
            generate_test_vectors(params.type_tag, kat_file)
            return 0

        run(params, settings)
    except FATAL_ERRORS as err:
        fatal(str(err))
    return 0


if __name__ == '__main__':
    sys.exit(main())
