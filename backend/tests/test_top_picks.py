"""Unit tests for multi-model top-pick agreement."""

from __future__ import annotations

import pytest

from insights.top_picks import clamp_min_agree, find_top_picks, model_top_picks, top_entry_for


def _entry(horse_id, race_id="r1", mlp=0.1, rf=0.1, xgb=0.1, benter=0.1, ens=0.1, odds=6.0):
    return {
        "horse_id": horse_id,
        "race_id": race_id,
        "horse_name": horse_id.upper(),
        "mlp_proba": mlp,
        "rf_proba": rf,
        "xgboost_proba": xgb,
        "benter_proba": benter,
        "ensemble_proba": ens,
        "current_odds": odds,
    }


RACE = {"race_id": "r1", "off_time": "02:00", "course_name": "Ascot", "field_size": 3}


def _field():
    return [
        _entry("a", mlp=0.5, rf=0.2, xgb=0.5, benter=0.5, ens=0.5, odds=3.0),
        _entry("b", mlp=0.3, rf=0.6, xgb=0.3, benter=0.3, ens=0.3),
        _entry("c"),
    ]


def test_horse_with_enough_agreeing_models_is_returned():
    picks = find_top_picks([RACE], _field(), min_agree=3)
    assert len(picks) == 1
    pick = picks[0]
    assert pick.horse_id == "a"
    assert pick.models_agree == 4
    assert pick.models == ["benter", "ensemble", "mlp", "xgboost"]
    assert pick.normalized_probability == pytest.approx(0.5 / 0.9)
    assert pick.course_name == "Ascot"


def test_lower_threshold_includes_single_model_picks_after_stronger_ones():
    picks = find_top_picks([RACE], _field(), min_agree=1)
    assert [p.horse_id for p in picks] == ["a", "b"]
    assert picks[1].models == ["rf"]


def test_min_agree_is_clamped():
    assert clamp_min_agree(0) == 1
    assert clamp_min_agree(9) == 5
    assert clamp_min_agree(None) == 3
    assert find_top_picks([RACE], _field(), min_agree=9) == []


def test_ties_prefer_higher_ensemble_then_shorter_odds_then_name():
    x = _entry("x", mlp=0.4, ens=0.2, odds=5.0)
    y = _entry("y", mlp=0.4, ens=0.3, odds=8.0)
    assert top_entry_for([x, y], "mlp_proba")[0]["horse_id"] == "y"

    p = _entry("p", mlp=0.4, ens=0.3, odds=8.0)
    q = _entry("q", mlp=0.4, ens=0.3, odds=4.0)
    assert top_entry_for([p, q], "mlp_proba")[0]["horse_id"] == "q"

    m = _entry("m", mlp=0.4, ens=0.3, odds=4.0)
    n = _entry("n", mlp=0.4, ens=0.3, odds=4.0)
    assert top_entry_for([n, m], "mlp_proba")[0]["horse_id"] == "m"


def test_min_prob_excludes_weak_scores():
    weak = [_entry("a"), _entry("b")]
    assert top_entry_for(weak, "mlp_proba", min_prob=0.5) is None
    assert find_top_picks([RACE], weak, min_agree=1, min_prob=0.5) == []


def test_races_ordered_by_card_time():
    early = {"race_id": "r2", "off_time": "12:30", "course_name": "York"}
    entries = _field() + [
        _entry("z", race_id="r2", mlp=0.9, rf=0.9, xgb=0.9, benter=0.9, ens=0.9),
        _entry("w", race_id="r2"),
    ]
    picks = find_top_picks([RACE, early], entries, min_agree=3)
    assert [(p.race_id, p.horse_id) for p in picks] == [("r2", "z"), ("r1", "a")]


def test_race_without_entries_is_skipped():
    assert find_top_picks([RACE], [], min_agree=1) == []


def test_model_top_picks_can_require_positive_scores():
    zeros = [_entry("a", mlp=0, rf=0, xgb=0, benter=0, ens=0), _entry("b", mlp=0, rf=0, xgb=0, benter=0, ens=0)]
    assert model_top_picks(zeros, require_positive=True) == {}
    assert model_top_picks(_field())["a"] == ["mlp", "xgboost", "benter", "ensemble"]


def test_to_dict_carries_reason():
    out = find_top_picks([RACE], _field())[0].to_dict()
    assert out["ai_reason"] == "4 model top pick"
    assert out["race_details"]["field_size"] == 3
