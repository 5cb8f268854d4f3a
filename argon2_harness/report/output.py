import base64
import sys
from typing import Optional, TextIO

from argon2.low_level import ARGON2_VERSION, Type

from argon2_harness.config import ENCODED_CAPACITY_DEF
from argon2_harness.crypto.context import HashContext
from argon2_harness.crypto.primitive import effective_m_cost, type_name


class EncodingError(ValueError):
    """Raised when an encoded hash does not fit the destination buffer"""
    def __init__(self, needed: int, capacity: int):
        self.needed = needed
        self.capacity = capacity
        super().__init__(f"encoded hash needs {needed} bytes, buffer holds {capacity}")


def hex_line(data) -> str:
    return bytes(data).hex() + "\n"


def print_bytes(data, out: Optional[TextIO] = None) -> None:
    (out or sys.stdout).write(hex_line(data))


def _b64(data) -> str:
    return base64.b64encode(bytes(data)).decode('ascii').rstrip('=')


def encode_string(context: HashContext, type_: Type, capacity: int = ENCODED_CAPACITY_DEF) -> str:
    """
    Render the PHC string for a finished context.

    `capacity` counts the terminating NUL of the reference encoder, so the
    string itself may use at most capacity - 1 bytes.

    Raises:
        EncodingError: the result would not fit; it is never truncated.
    """
    encoded = (
        f"$argon2{type_name(type_)}$v={ARGON2_VERSION}"
        f"$m={effective_m_cost(context)},t={context.t_cost},p={context.lanes}"
        f"${_b64(context.salt)}${_b64(context.out)}"
    )
    needed = len(encoded) + 1
    if needed > capacity:
        raise EncodingError(needed, capacity)
    return encoded


def report_run(context: HashContext, type_: Type, password: bytes, seconds: float,
               mcycles: float, capacity: int = ENCODED_CAPACITY_DEF,
               out: Optional[TextIO] = None) -> str:
    """Print the single-run report and return the encoded string."""
    out = out or sys.stdout
    # Encode first so a too-small buffer fails before anything is printed
    encoded = encode_string(context, type_, capacity)
    out.write(f"Argon2{type_name(type_)} with\n")
    out.write(f"\tt_cost = {context.t_cost}\n")
    out.write(f"\tm_cost = {context.m_cost}\n")
    out.write(f"\tpassword = {password.decode('utf-8', errors='replace')}\n")
    out.write("\tsalt = ")
    print_bytes(context.salt, out)
    out.write(f"{seconds:2.3f} seconds ({mcycles:.3f} mebicycles)\n")
    print_bytes(context.out, out)
    out.write(encoded + "\n")
    return encoded
