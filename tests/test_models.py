
import math

import pytest
from pydantic import ValidationError

from emoji_overlay.models import (
    CATEGORIES, ExpressionCategory, ExpressionVector, RankedExpression, icon_for, to_category,
)

def test_from_mapping_aliases_and_unknown_keys():
    v = ExpressionVector.from_mapping(
        {"happy": 80.0, "fear": 10.0, "disgust": 5.0, "surprise": 5.0, "contempt": 50.0},
        scale=100.0,
    )
    assert v.happy == pytest.approx(0.8)
    assert v.fearful == pytest.approx(0.1)
    assert v.disgusted == pytest.approx(0.05)
    assert v.surprised == pytest.approx(0.05)
    assert v.neutral == 0.0
    assert "contempt" not in v.as_dict()

def test_malformed_values_become_zero_or_clamped():
    v = ExpressionVector.from_mapping({"happy": float("nan"), "sad": None, "angry": "x",
                                       "neutral": -0.3, "surprised": 4.0})
    assert v.happy == 0.0 and v.sad == 0.0 and v.angry == 0.0
    assert v.neutral == 0.0
    assert v.surprised == 1.0
    assert not any(math.isnan(x) for x in v.as_array())

def test_vector_is_immutable():
    v = ExpressionVector(happy=0.5)
    with pytest.raises(ValidationError):
        v.happy = 0.1

def test_array_roundtrip_follows_enum_order():
    v = ExpressionVector(neutral=0.1, surprised=0.7)
    arr = v.as_array()
    assert arr.shape == (len(CATEGORIES),)
    assert arr[0] == pytest.approx(0.1) and arr[-1] == pytest.approx(0.7)
    assert ExpressionVector.from_array(arr) == v
    assert v.get(ExpressionCategory.SURPRISED) == pytest.approx(0.7)

def test_categories_and_icons():
    assert [c.value for c in CATEGORIES] == [
        "neutral", "happy", "sad", "angry", "fearful", "disgusted", "surprised"]
    assert icon_for(ExpressionCategory.HAPPY) == "😊"
    assert all(icon_for(c) for c in CATEGORIES)
    assert to_category("Happy") is ExpressionCategory.HAPPY
    assert to_category("contempt") is None
    assert to_category(3) is None

def test_ranked_percentage():
    r = RankedExpression(category=ExpressionCategory.SAD, confidence=0.12345)
    assert r.percentage == 12.3
