import pytest

from hltas_core import (
    Autofunc,
    CountValue,
    ErrorCode,
    Frame,
    FrameBulk,
    HLTASError,
    PointValue,
    Save,
    SharedSeed,
    StrafeDir,
    StrafeSettings,
    StrafeType,
    YawSpeedValue,
    YawValue,
)


def _strafe(type_, dir_):
    return StrafeSettings(StrafeType(type_), StrafeDir(dir_))


@pytest.mark.parametrize(
    "funcs",
    [
        {"autojump": Autofunc(), "ducktap": Autofunc()},
        {"autojump": Autofunc(3), "ducktap": Autofunc(0, variant=True)},
        {"lgagst": Autofunc(), "autojump": Autofunc(), "ducktap": Autofunc()},
    ],
)
def test_autojump_and_ducktap_are_exclusive(funcs):
    with pytest.raises(HLTASError) as exc:
        FrameBulk("0.001", **funcs)
    assert exc.value.code == ErrorCode.BOTHAJDT


def test_lgagst_needs_an_action():
    with pytest.raises(HLTASError) as exc:
        FrameBulk("0.001", lgagst=Autofunc())
    assert exc.value.code == ErrorCode.NOLGAGSTACTION


def test_lgagst_rejects_action_times():
    with pytest.raises(HLTASError) as exc:
        FrameBulk("0.001", lgagst=Autofunc(), ducktap=Autofunc(2))
    assert exc.value.code == ErrorCode.LGAGSTACTIONTIMES


def test_repeats_must_be_positive():
    with pytest.raises(ValueError):
        FrameBulk("0.001", repeats=0)


def test_frame_time_must_look_numeric():
    with pytest.raises(ValueError):
        FrameBulk("fast")


@pytest.mark.parametrize(
    "strafe, kind",
    [
        (None, YawValue),
        (_strafe(0, 0), None),
        (_strafe(1, 1), None),
        (_strafe(2, 2), None),
        (_strafe(0, 3), YawValue),
        (_strafe(3, 4), PointValue),
        (_strafe(0, 5), YawValue),
        (_strafe(0, 6), CountValue),
        (_strafe(0, 7), CountValue),
        (_strafe(4, 0), YawSpeedValue),
        (_strafe(4, 1), YawSpeedValue),
    ],
)
def test_target_kind(strafe, kind):
    if kind is None:
        target = None
    elif kind is PointValue:
        target = PointValue(1, 2)
    else:
        target = kind(1)
    assert FrameBulk("0.001", strafe=strafe, target=target).target_kind() is kind


def test_mismatched_target_is_rejected():
    with pytest.raises(ValueError):
        FrameBulk("0.001", strafe=_strafe(0, 3), target=PointValue(1, 2))
    with pytest.raises(ValueError):
        FrameBulk("0.001", strafe=_strafe(0, 2), target=YawValue(90))


def test_inactive_member_access_is_a_type_error():
    bulk = FrameBulk("0.001", strafe=_strafe(0, 3), target=YawValue(90))
    assert bulk.yaw == 90
    with pytest.raises(TypeError):
        bulk.point
    with pytest.raises(TypeError):
        bulk.count
    with pytest.raises(TypeError):
        FrameBulk("0.001").yaw


def test_const_yawspeed_needs_a_speed():
    with pytest.raises(HLTASError) as exc:
        FrameBulk("0.001", strafe=_strafe(4, 0))
    assert exc.value.code == ErrorCode.NO_YAWSPEED


@pytest.mark.parametrize("direction", [2, 3, 4, 5, 6, 7])
def test_const_yawspeed_only_left_or_right(direction):
    with pytest.raises(HLTASError) as exc:
        _strafe(4, direction)
    assert exc.value.code == ErrorCode.UNSUPPORTED_YAWSPEED_DIR


def test_with_autofunc():
    bulk = FrameBulk("0.001").with_autofunc("jumpbug", times=3)
    assert bulk.jumpbug == Autofunc(3)
    bulk = bulk.with_autofunc("dbc", variant=True)
    assert bulk.dbc_ceilings
    assert bulk.without_autofunc("jumpbug").jumpbug is None

    with pytest.raises(ValueError):
        bulk.with_autofunc("hover")
    with pytest.raises(ValueError):
        bulk.with_autofunc("autojump", variant=True)


def test_reset_autofuncs_limited_lgagst_takes_its_action():
    bulk = FrameBulk(
        "0.001",
        lgagst=Autofunc(2),
        autojump=Autofunc(),
        dbc=Autofunc(1),
        dbg=Autofunc(),
    )
    after = bulk.reset_autofuncs()
    assert after.lgagst is None
    assert after.autojump is None
    assert after.dbc is None
    assert after.dbg == Autofunc()


def test_reset_autofuncs_keeps_unlimited():
    bulk = FrameBulk(
        "0.001",
        lgagst=Autofunc(),
        ducktap=Autofunc(0, variant=True),
        jumpbug=Autofunc(4),
    )
    after = bulk.reset_autofuncs()
    assert after.lgagst == Autofunc()
    assert after.ducktap_0ms
    assert after.jumpbug is None
    assert FrameBulk("0.001").reset_autofuncs() == FrameBulk("0.001")


def test_frame_comments_are_newline_terminated():
    assert Frame(Save("a"), "note").comments == "note\n"
    assert Frame(Save("a"), "one\ntwo\n").comments == "one\ntwo\n"
    assert Frame(Save("a")).comments == ""


def test_directive_frame_has_no_bulk():
    frame = Frame(SharedSeed(1))
    assert not frame.is_movement
    with pytest.raises(TypeError):
        frame.bulk


@pytest.mark.parametrize("factory", [lambda: Save(""), lambda: Save(" a"), lambda: SharedSeed(-1), lambda: CountValue(0), lambda: Autofunc(-1)])
def test_directive_invariants(factory):
    with pytest.raises(ValueError):
        factory()
