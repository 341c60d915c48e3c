from workout_ai.core.resolve import resolve


def test_primary_wins_even_when_falsy():
    assert resolve(0, 5) == 0
    assert resolve([], ["x"]) == []


def test_fallback_then_default():
    assert resolve(None, 5) == 5
    assert resolve(None, None, default="d") == "d"
    assert resolve(None) is None
