import logging
import os
import sys
from typing import Optional, TextIO

from argon2_harness.crypto.builder import build_kat_context
from argon2_harness.crypto.primitive import check_status, invoke, resolve_type, type_name

logger = logging.getLogger(__name__)


class KatFile:
    """Handle for the known-answer-test file: removed, then appended to."""

    def __init__(self, path: str):
        self.path = path

    def remove(self) -> bool:
        """Delete the file if present; return True when something was removed."""
        try:
            os.remove(self.path)
        except FileNotFoundError:
            return False
        logger.info("removed stale KAT file %s", self.path)
        return True

    def append(self, text: str) -> None:
        with open(self.path, 'a', encoding='utf-8') as f:
            f.write(text)

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def read(self) -> str:
        with open(self.path, 'r', encoding='utf-8') as f:
            return f.read()


def generate_test_vectors(tag: str, kat_file: KatFile, out: Optional[TextIO] = None,
                          allocator=None) -> bytes:
    """
    Regenerate the KAT file for Argon2<tag> from the fixed test-vector context.

    Returns the produced tag.

    Raises:
        UnknownTypeError: tag is not 'd' or 'i'.
        PrimitiveError: the primitive returned a non-OK status.
    """
    type_ = resolve_type(tag)
    kat_file.remove()
    out = out or sys.stdout

    out.write(f'Generating test vectors for Argon2{type_name(type_)} in file "{kat_file.path}".\n')

    if allocator is not None:
        context = build_kat_context(allocate_cbk=allocator.allocate, free_cbk=allocator.free)
    else:
        context = build_kat_context()

    status = invoke(context, type_, kat=kat_file)
    check_status(status, type_)
    return bytes(context.out)
