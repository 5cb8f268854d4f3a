import io
import pytest
from argon2.low_level import Type, hash_secret

from argon2_harness.crypto.context import HashContext
from argon2_harness.crypto.primitive import invoke
from argon2_harness.report.output import EncodingError, encode_string, hex_line, print_bytes, report_run


def _finished_context(type_, pwd=b"pw", m_cost=4096):
    ctx = HashContext(outlen=32, pwd=bytearray(pwd), salt=bytes(16),
                      t_cost=3, m_cost=m_cost, lanes=4, threads=4)
    assert invoke(ctx, type_) == 0
    return ctx


def test_hex_line():
    assert hex_line(b"\x00\xab\xff") == "00abff\n"
    assert hex_line(b"") == "\n"


def test_print_bytes_uses_given_stream():
    out = io.StringIO()
    print_bytes(bytearray(b"\x0f\xf0"), out)
    assert out.getvalue() == "0ff0\n"


@pytest.mark.parametrize("type_,prefix", [(Type.D, "$argon2d$"), (Type.I, "$argon2i$")])
def test_encode_matches_reference_encoder(type_, prefix):
    ctx = _finished_context(type_)
    encoded = encode_string(ctx, type_)
    assert encoded.startswith(prefix)
    assert len(encoded) < 300
    expected = hash_secret(b"pw", bytes(16), time_cost=3, memory_cost=4096,
                           parallelism=4, hash_len=32, type=type_)
    assert encoded == expected.decode("ascii")


def test_encode_never_truncates():
    ctx = _finished_context(Type.D)
    encoded = encode_string(ctx, Type.D)
    # exactly enough room for the string and its terminator
    assert encode_string(ctx, Type.D, capacity=len(encoded) + 1) == encoded
    with pytest.raises(EncodingError) as exc:
        encode_string(ctx, Type.D, capacity=len(encoded))
    assert exc.value.needed == len(encoded) + 1
    with pytest.raises(EncodingError):
        encode_string(ctx, Type.D, capacity=16)


def test_report_run_layout():
    ctx = _finished_context(Type.D)
    out = io.StringIO()
    encoded = report_run(ctx, Type.D, b"pw", seconds=0.1234, mcycles=1.5, out=out)
    lines = out.getvalue().splitlines()
    assert lines[0] == "Argon2d with"
    assert lines[1] == "\tt_cost = 3"
    assert lines[2] == "\tm_cost = 4096"
    assert lines[3] == "\tpassword = pw"
    assert lines[4] == "\tsalt = " + "00" * 16
    assert lines[5] == "0.123 seconds (1.500 mebicycles)"
    assert lines[6] == bytes(ctx.out).hex()
    assert lines[7] == encoded


def test_report_run_fails_before_printing():
    ctx = _finished_context(Type.I)
    out = io.StringIO()
    with pytest.raises(EncodingError):
        report_run(ctx, Type.I, b"pw", seconds=0.0, mcycles=0.0, capacity=10, out=out)
    assert out.getvalue() == ""
