from types import SimpleNamespace

import pytest

from wireguard_conf import AmneziaSettings, InvalidAmneziaSetting, WireguardError


def make_settings(**overrides) -> AmneziaSettings:
    values = dict(jc=4, jmin=40, jmax=70, s1=20, s2=30, h1=11, h2=22, h3=33, h4=44)
    values.update(overrides)
    return AmneziaSettings(**values)


def test_random_settings_validate():
    for _ in range(50):
        settings = AmneziaSettings.random()
        settings.validate()
        assert settings.is_valid()


def test_valid_settings_pass():
    make_settings().validate()


@pytest.mark.parametrize(
    "overrides,field",
    [
        ({"jc": 9999}, "Jc"),
        ({"jc": 0}, "Jc"),
        ({"jmin": 100, "jmax": 50}, "Jmin"),
        ({"jmin": 1280, "jmax": 1280}, "Jmin"),
        ({"jmax": 9999}, "Jmax"),
        ({"s1": 9999}, "S1"),
        ({"s1": 100, "s2": 156}, "S1"),
        ({"s2": 9999}, "S2"),
        ({"h1": 1, "h2": 1}, "H1/H2/H3/H4"),
        ({"h3": 44}, "H1/H2/H3/H4"),
    ],
)
def test_invalid_settings(overrides, field):
    settings = make_settings(**overrides)
    with pytest.raises(InvalidAmneziaSetting) as exc:
        settings.validate()
    assert exc.value.field == field
    assert str(exc.value) == f"invalid amnezia setting: {field}"
    assert not settings.is_valid()


def test_first_failing_field_is_reported():
    settings = make_settings(jc=9999, s2=9999)
    with pytest.raises(InvalidAmneziaSetting) as exc:
        settings.validate()
    assert exc.value.field == "Jc"


def test_boundaries_accepted():
    make_settings(jc=128, jmin=1279, jmax=1280, s1=1132, s2=1000).validate()
    make_settings(s1=0, s2=1188).validate()
    make_settings(jc=1, jmin=0, jmax=0, s1=0, s2=0).validate()


def test_error_hierarchy():
    with pytest.raises(WireguardError):
        make_settings(jc=0).validate()
    with pytest.raises(ValueError):
        make_settings(jc=0).validate()


def test_render_block():
    text = str(make_settings(i2="<r 16>"))
    assert text == (
        "Jc = 4\nJmin = 40\nJmax = 70\nS1 = 20\nS2 = 30\n"
        "H1 = 11\nH2 = 22\nH3 = 33\nH4 = 44\nI2 = <r 16>\n"
    )


def test_apply_args_overrides():
    settings = make_settings(i1="<b 0x01>")
    args = SimpleNamespace(jc="7", jmax=90, h4=None, i1="", i3="<t>")
    settings.apply_args_overrides(args)
    assert settings.jc == 7
    assert settings.jmax == 90
    assert settings.h4 == 44
    assert settings.i1 is None
    assert settings.i3 == "<t>"
