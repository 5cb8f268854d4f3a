"""
Adapter between HashContext and the Argon2 reference primitive shipped with argon2-cffi.

The primitive is driven through `argon2.low_level.core`, which takes a raw
`argon2_context` struct. All cffi buffers are created here and kept alive
until the call returns.
"""

import hashlib
import logging
import struct

from argon2.low_level import ARGON2_VERSION, Type, core, error_to_str, ffi, lib

from argon2_harness.crypto.context import HashContext

logger = logging.getLogger(__name__)

# argon2.h
FLAG_CLEAR_PASSWORD = 1 << 0
FLAG_CLEAR_SECRET = 1 << 1
MEMORY_ALLOCATION_ERROR = -22
# 2 * ARGON2_SYNC_POINTS
MIN_BLOCKS_PER_LANE = 8

PREHASH_DIGEST_LENGTH = 64

_TYPES = {
    "d": Type.D,
    "i": Type.I,
}


class UnknownTypeError(ValueError):
    """Raised for a type tag other than 'd' or 'i'"""
    def __init__(self, tag: str):
        self.tag = tag
        super().__init__("wrong Argon2 type")


class PrimitiveError(Exception):
    """Raised when the primitive returns a non-OK status"""
    def __init__(self, status: int, type_: Type):
        self.status = status
        self.type = type_
        super().__init__(f"Argon2{type_name(type_)} failed ({status}): {error_to_str(status)}")


def resolve_type(tag: str) -> Type:
    try:
        return _TYPES[tag]
    except (KeyError, TypeError):
        raise UnknownTypeError(tag)


def type_name(type_: Type) -> str:
    return type_.name.lower()


def _cbuffer(data):
    """Copy bytes into a fresh cffi buffer; empty input maps to NULL."""
    if not data:
        return ffi.NULL
    buf = ffi.new("uint8_t[]", len(data))
    ffi.memmove(buf, bytes(data), len(data))
    return buf


def _wrap_allocator(context: HashContext):
    if not context.has_custom_allocator:
        return ffi.NULL, ffi.NULL

    allocate = context.allocate_cbk
    free = context.free_cbk

    @ffi.callback("int(uint8_t **, size_t)", error=MEMORY_ALLOCATION_ERROR)
    def allocate_cbk(memory, length):
        block = allocate(length)
        if block is None:
            memory[0] = ffi.NULL
            return MEMORY_ALLOCATION_ERROR
        memory[0] = block
        return lib.ARGON2_OK

    @ffi.callback("void(uint8_t *, size_t)")
    def free_cbk(memory, length):
        free(memory, length)

    return allocate_cbk, free_cbk


def effective_m_cost(context: HashContext) -> int:
    """Memory cost actually handed to the primitive: at least 8 blocks per lane."""
    return max(context.m_cost, MIN_BLOCKS_PER_LANE * context.lanes)


def _flags(context: HashContext) -> int:
    # clear_memory has no runtime flag; the bundled library always wipes its blocks
    flags = 0
    if context.clear_password:
        flags |= FLAG_CLEAR_PASSWORD
    if context.clear_secret:
        flags |= FLAG_CLEAR_SECRET
    return flags


def invoke(context: HashContext, type_: Type, kat=None) -> int:
    """
    Run the primitive on `context` and return its integer status.

    On success the tag is copied into `context.out`. When the context asks for
    internal-state printing and a KAT handle is given, a record is appended to it.
    A memory cost below 8 blocks per lane is raised to that minimum.
    """
    m_cost = effective_m_cost(context)
    if m_cost != context.m_cost:
        logger.info("raising m_cost from %d to %d for %d lanes", context.m_cost, m_cost, context.lanes,
                    extra={"m_cost": m_cost, "argon2_type": type_name(type_)})

    cout = ffi.new("uint8_t[]", context.outlen)
    cpwd = _cbuffer(context.pwd)
    csalt = _cbuffer(context.salt)
    csecret = _cbuffer(context.secret)
    cad = _cbuffer(context.ad)
    allocate_cbk, free_cbk = _wrap_allocator(context)

    cctx = ffi.new("argon2_context *", dict(
        version=ARGON2_VERSION,
        out=cout, outlen=context.outlen,
        pwd=cpwd, pwdlen=context.pwdlen,
        salt=csalt, saltlen=len(context.salt),
        secret=csecret, secretlen=len(context.secret or b''),
        ad=cad, adlen=len(context.ad or b''),
        t_cost=context.t_cost,
        m_cost=m_cost,
        lanes=context.lanes,
        threads=context.threads,
        allocate_cbk=allocate_cbk,
        free_cbk=free_cbk,
        flags=_flags(context),
    ))

    status = core(cctx, type_.value)
    if status != lib.ARGON2_OK:
        logger.error("Argon2%s returned %d: %s", type_name(type_), status, error_to_str(status),
                     extra={"status": status, "argon2_type": type_name(type_)})
        return status

    context.out[:] = ffi.buffer(cout, context.outlen)

    # Record before the password is wiped; H0 covers it
    if context.print_internals and kat is not None:
        kat.append(format_kat_record(context, type_))

    if context.clear_password and isinstance(context.pwd, bytearray):
        context.pwd[:] = bytes(len(context.pwd))
    return status


def check_status(status: int, type_: Type) -> None:
    if status != lib.ARGON2_OK:
        raise PrimitiveError(status, type_)


def prehash_digest(context: HashContext, type_: Type) -> bytes:
    """Compute H0, the 64-byte BLAKE2b digest over all inputs (RFC 9106, 3.2)."""
    pwd = bytes(context.pwd)
    secret = context.secret or b''
    ad = context.ad or b''
    h = hashlib.blake2b(digest_size=PREHASH_DIGEST_LENGTH)
    h.update(struct.pack('<6I', context.lanes, context.outlen, effective_m_cost(context),
                         context.t_cost, ARGON2_VERSION, type_.value))
    for field in (pwd, context.salt, secret, ad):
        h.update(struct.pack('<I', len(field)))
        h.update(field)
    return h.digest()


def _hex_spaced(data) -> str:
    return " ".join(f"{b:02x}" for b in data)


def format_kat_record(context: HashContext, type_: Type) -> str:
    """Render one known-answer record: inputs, pre-hashing digest and tag."""
    bar = "=" * 39
    m_cost = effective_m_cost(context)
    lines = [
        bar,
        f"Argon2{type_name(type_)} version number {ARGON2_VERSION}",
        bar,
        f"Memory: {context.m_cost} KiB, Iterations: {context.t_cost}, "
        f"Parallelism: {context.lanes} lanes, Tag length: {context.outlen} bytes",
    ]
    if m_cost != context.m_cost:
        lines.append(f"Memory raised to {m_cost} KiB ({MIN_BLOCKS_PER_LANE} blocks per lane minimum)")
    lines += [
        f"Password[{context.pwdlen}]: {_hex_spaced(context.pwd)}",
        f"Salt[{len(context.salt)}]: {_hex_spaced(context.salt)}",
    ]
    if context.secret:
        lines.append(f"Secret[{len(context.secret)}]: {_hex_spaced(context.secret)}")
    if context.ad:
        lines.append(f"Associated data[{len(context.ad)}]: {_hex_spaced(context.ad)}")
    lines.append(f"Pre-hashing digest: {_hex_spaced(prehash_digest(context, type_))}")
    lines.append(f"Tag: {_hex_spaced(context.out)}")
    return "\n".join(lines) + "\n"
