# test_dispatch.py
import pytest

from RogueTrader.dispatch import RollMessage, Visibility, build_message, normalize_visibility
from RogueTrader.rules.outcome import resolve_outcome
from RogueTrader.rules.types import DamageRecord, HitLocation


@pytest.mark.parametrize(
    "mode,expected",
    [
        ("publicroll", Visibility.PUBLIC),
        ("gmroll", Visibility.GM),
        ("blindroll", Visibility.GM),
        ("private-to-gm", Visibility.GM),
        ("selfroll", Visibility.SELF),
        ("SELF", Visibility.SELF),
        (None, Visibility.PUBLIC),
        ("shout", Visibility.PUBLIC),
        (Visibility.GM, Visibility.GM),
    ],
)
def test_normalize_visibility(mode, expected):
    assert normalize_visibility(mode) is expected


def test_whisper_targets():
    assert RollMessage(kind="roll").whisper is None
    assert RollMessage(kind="roll", visibility=Visibility.GM).whisper == "gm"
    assert RollMessage(kind="roll", visibility=Visibility.SELF).whisper == "self"


def test_build_message_from_result():
    msg = build_message("roll", resolve_outcome(50, 35), visibility="gmroll", name="Dodge")
    assert msg.visibility is Visibility.GM
    assert msg.payload == {"target": 50, "result": 35, "is_success": True, "dos": 1, "dof": 0}


def test_message_json_keeps_location_tag():
    dmg = DamageRecord(total=9, penetration=2, dos=1, formula="1d10+0", location=HitLocation.HEAD)
    msg = build_message("damage", dmg)
    same = RollMessage.from_json(msg.to_json())
    assert same.kind == "damage"
    assert same.payload["location"] == "head"
    assert same.payload["total"] == 9
