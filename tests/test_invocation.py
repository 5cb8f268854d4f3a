import pytest
from argon2_harness.params.clamp import UsageError
from argon2_harness.params.invocation import Mode, join_option_values, parse_invocation


def test_defaults():
    params = parse_invocation(["r"])
    assert params.mode is Mode.RUN
    assert params.type_tag == "i"
    assert params.t_cost == 3
    assert params.m_cost == 4096
    assert params.lanes == 4
    assert params.threads == 4
    assert params.password is None


def test_explicit_values():
    params = parse_invocation(["r", "-y", "d", "-t", "3", "-m", "12", "-i", "pw"])
    assert params.type_tag == "d"
    assert params.t_cost == 3
    assert params.m_cost == 4096
    assert params.lanes == 4
    assert params.threads == 4
    assert params.password == b"pw"


def test_long_options():
    params = parse_invocation(["--type", "d", "--tcost", "5", "--mcost", "4",
                               "--lanes", "2", "--threads", "8", "--password", "x", "r"])
    assert (params.type_tag, params.t_cost, params.m_cost, params.lanes, params.threads) == ("d", 5, 16, 2, 8)
    assert params.password == b"x"
    assert params.mode is Mode.RUN


def test_out_of_range_values_wrap():
    params = parse_invocation(["r", "-m", "999", "-t", "-1", "-l", "16777215", "-p", "16777216"])
    assert params.m_cost == 512
    assert params.t_cost == 0xFFFFFF
    assert params.lanes == 0
    assert params.threads == 1


def test_mode_selection():
    assert parse_invocation(["r", "g"]).mode is Mode.GENERATE
    assert parse_invocation(["g", "r"]).mode is Mode.RUN
    assert parse_invocation(["g", "b", "r"]).mode is Mode.BENCHMARK
    assert parse_invocation(["-t", "2"]).mode is Mode.RUN


def test_type_is_not_validated_here():
    assert parse_invocation(["r", "-y", "x"]).type_tag == "x"


@pytest.mark.parametrize("argv,message", [
    (["r", "-m"], "missing memory cost argument"),
    (["r", "-t"], "missing time cost argument"),
    (["r", "-p"], "missing threads argument"),
    (["r", "-l"], "missing lanes argument"),
    (["r", "-y"], "missing type argument"),
    (["r", "--password"], "missing password argument"),
])
def test_missing_values(argv, message):
    with pytest.raises(UsageError) as exc:
        parse_invocation(argv)
    assert str(exc.value) == message


@pytest.mark.parametrize("argv", [["r", "--bogus"], ["z"], ["r", "-x", "1"], ["r", "-h"]])
def test_unknown_arguments(argv):
    with pytest.raises(UsageError, match="unknown argument"):
        parse_invocation(argv)


def test_non_integer_value():
    with pytest.raises(UsageError, match="invalid lanes value"):
        parse_invocation(["r", "-l", "four"])


@pytest.mark.parametrize("argv,password", [
    (["r", "-i", "-secret"], b"-secret"),
    (["r", "-i", "--pw"], b"--pw"),
    (["r", "--password", "-p"], b"-p"),
    (["-i", "-i", "r"], b"-i"),
])
def test_password_may_start_with_dash(argv, password):
    params = parse_invocation(argv)
    assert params.password == password
    assert params.mode is Mode.RUN


def test_dash_value_does_not_swallow_following_options():
    params = parse_invocation(["r", "-i", "-p", "-p", "2", "-t", "-1"])
    assert params.password == b"-p"
    assert params.threads == 2
    assert params.t_cost == 0xFFFFFF


def test_dash_prefixed_type_reaches_dispatch():
    assert parse_invocation(["r", "-y", "-d"]).type_tag == "-d"


def test_join_option_values():
    assert join_option_values(["r", "-i", "-x", "-m"]) == ["r", "--password=-x", "-m"]
    assert join_option_values(["g", "--type", "d"]) == ["g", "--type=d"]
