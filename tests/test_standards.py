"""Unit tests for the standard impact and relation heuristics."""

from __future__ import annotations

import datetime as dt
import typing as typ

import pytest

from dah.config import EngineSettings
from dah.errors import ExtensionValidationError, UnknownFactorError
from dah.extensions import (
    DurationPeriod,
    FromToPeriod,
    Sign,
    Standards,
    VisualType,
    map_clamp,
    periods_length,
)
from dah.scoring import Data, DiagonalMatrix, Entry, aggregate

if typ.TYPE_CHECKING:
    from dah.scoring import Context, Impact


def _days(count: float) -> list[DurationPeriod]:
    return [DurationPeriod(dt.timedelta(days=count))]


def _value(context: Context, impact: Impact, name: str) -> float:
    return float(impact.score[context.factor(name).index])


def _source(impact: object) -> dict[str, object]:
    return impact.dah_meta["DAH_ir_source"]  # pyright: ignore[reportAttributeAccessIssue]


def test_standards_depend_on_factor_catalog(standards: Standards) -> None:
    """The heuristics score against the standard catalog."""
    assert standards.name == "DAH_standards", "unexpected extension name"
    assert standards.dependencies() == ("DAH_factors",), "unexpected dependencies"


def test_cry_with_single_emotion(
    standard_context: Context,
    standards: Standards,
) -> None:
    """A single emotion receives the whole base."""
    impact = standards.cry(standard_context, {"show": 1.0}, [("CP", 1.0)])

    assert _value(standard_context, impact, "CP") == pytest.approx(4.0), (
        "expected the cry base on CP"
    )
    assert _source(impact)["name"] == "cry", "expected cry provenance"
    assert _source(impact)["extension"] == "DAH_standards", "expected extension name"


def test_emotion_spreads_base_across_emotions(
    standard_context: Context,
    standards: Standards,
) -> None:
    """Several emotions share the base through combine."""
    impact = standards.cry(standard_context, {"show": 1.0}, [("CP", 1.0), ("MP", 0.5)])

    combined = 1.0 + 0.5 * 0.9
    assert _value(standard_context, impact, "CP") == pytest.approx(4.0 / combined), (
        "unexpected CP share"
    )
    assert _value(standard_context, impact, "MP") == pytest.approx(
        4.0 * 0.5**0.9 / combined
    ), "unexpected MP share"
    assert _value(standard_context, impact, "AP") == 0.0, "expected AP untouched"


@pytest.mark.parametrize(
    "emotions",
    [
        pytest.param([], id="empty"),
        pytest.param([("CP", 0.0)], id="zero-weight"),
        pytest.param([("CP", 1.0), ("MP", -0.5)], id="negative-weight"),
    ],
)
def test_emotion_rejects_invalid_emotions(
    standard_context: Context,
    standards: Standards,
    emotions: list[tuple[str, float]],
) -> None:
    """Emotion impacts need positive weights."""
    with pytest.raises(ExtensionValidationError) as excinfo:
        standards.emotion(standard_context, {"show": 1.0}, 1.0, emotions)

    assert excinfo.value.extension == "DAH_standards", "expected extension name"


def test_emotion_rejects_unknown_factor(
    standard_context: Context,
    standards: Standards,
) -> None:
    """Emotion names must be registered factors."""
    with pytest.raises(UnknownFactorError):
        standards.emotion(standard_context, {"show": 1.0}, 1.0, [("Joy", 1.0)])


def test_contributor_strength_becomes_scalar_matrix(
    standard_context: Context,
    standards: Standards,
) -> None:
    """Contributor strengths scale every factor."""
    impact = standards.politics(standard_context, {"show": 0.5})

    matrix = impact.contributors["show"]
    assert isinstance(matrix, DiagonalMatrix), "expected a diagonal matrix"
    assert set(matrix.data.tolist()) == {0.5}, f"unexpected data {matrix.data!r}"
    assert _value(standard_context, impact, "Additional") == 0.75, (
        "expected the politics bonus"
    )


@pytest.mark.parametrize(
    ("days", "expected_base"),
    [
        pytest.param(5.0, 0.3 * 5.0**1.3, id="five-days"),
        pytest.param(20.0, 0.3 * 10.0**1.3, id="capped-at-ten-days"),
    ],
)
def test_pads_base_grows_with_days(
    standard_context: Context,
    standards: Standards,
    days: float,
    expected_base: float,
) -> None:
    """The aftermath base follows the day count, capped at ten days."""
    impact = standards.pads(standard_context, {"show": 1.0}, _days(days), [("AP", 1.0)])

    assert _value(standard_context, impact, "AP") == pytest.approx(expected_base), (
        "unexpected pads base"
    )
    assert _source(impact)["padsArgs"]["days"] == pytest.approx(days), (  # pyright: ignore[reportIndexIssue]
        "expected the day count in provenance"
    )


@pytest.mark.parametrize(
    ("method", "factor", "sign", "expected"),
    [
        pytest.param("aei", 0.5, Sign.POSITIVE, 2.5, id="aei-positive"),
        pytest.param("aei", 0.5, Sign.NEGATIVE, -2.5, id="aei-negative"),
        pytest.param("nei", 1.0, Sign.POSITIVE, 2.0, id="nei-max"),
        pytest.param("nei", 0.0, Sign.NEGATIVE, 0.0, id="nei-zero"),
    ],
)
def test_xei_maps_factor_to_signed_base(
    standard_context: Context,
    standards: Standards,
    method: str,
    factor: float,
    sign: Sign,
    expected: float,
) -> None:
    """Emotional impact factors map linearly onto their base range."""
    impact = getattr(standards, method)(
        standard_context, {"show": 1.0}, factor, sign, [("AU", 1.0)]
    )

    assert _value(standard_context, impact, "AU") == pytest.approx(expected), (
        f"unexpected {method} value"
    )
    assert _source(impact)["xeiArgs"]["sign"] == sign.name.lower(), (  # pyright: ignore[reportIndexIssue]
        "expected the sign in provenance"
    )


def test_aei_rejects_factor_outside_range(
    standard_context: Context,
    standards: Standards,
) -> None:
    """Factors above 1 cannot be mapped."""
    with pytest.raises(ExtensionValidationError, match="outside"):
        standards.aei(standard_context, {"show": 1.0}, 1.5, Sign.POSITIVE, [("AP", 1.0)])


def test_paired_heuristics_return_two_impacts(
    standard_context: Context,
    standards: Standards,
) -> None:
    """Combined heuristics emit the impact and its aftermath."""
    cry_pads = standards.cry_pads(standard_context, {"show": 1.0}, _days(3), [("CP", 1.0)])
    max_aei_pads = standards.max_aei_pads(
        standard_context, {"show": 1.0}, _days(3), [("CP", 1.0)]
    )

    assert [_source(item)["name"] for item in cry_pads] == ["cry", "pads"], (
        "unexpected cry_pads names"
    )
    assert [_source(item)["name"] for item in max_aei_pads] == ["aei", "pads"], (
        "unexpected max_aei_pads names"
    )
    assert _value(standard_context, max_aei_pads[0], "CP") == pytest.approx(3.0), (
        "expected the maximal aei base"
    )


def test_waifu_scales_with_days(
    standard_context: Context,
    standards: Standards,
) -> None:
    """Ninety days of attachment yields the base on MP."""
    impact = standards.waifu(standard_context, {"show": 1.0}, "Megumin", _days(90))

    assert _value(standard_context, impact, "MP") == pytest.approx(1.2), (
        "unexpected waifu score"
    )
    assert _source(impact)["waifuArgs"]["waifu"] == "Megumin", (  # pyright: ignore[reportIndexIssue]
        "expected the character name in provenance"
    )


@pytest.mark.parametrize(
    ("method", "factor_name", "expected"),
    [
        pytest.param("ehi", "AP", 3.5, id="ehi"),
        pytest.param("jumpscare", "MP", 1.0, id="jumpscare"),
        pytest.param("sleepless_night", "MP", 4.0, id="sleepless-night"),
        pytest.param("politics", "Additional", 0.75, id="politics"),
        pytest.param("dropped", "Boredom", -0.5, id="dropped"),
    ],
)
def test_fixed_heuristics(
    standard_context: Context,
    standards: Standards,
    method: str,
    factor_name: str,
    expected: float,
) -> None:
    """Fixed heuristics contribute a constant on one factor."""
    impact = getattr(standards, method)(standard_context, {"show": 1.0})

    assert _value(standard_context, impact, factor_name) == pytest.approx(expected), (
        f"unexpected {method} value"
    )


def test_epi_maps_factor(standard_context: Context, standards: Standards) -> None:
    """The factor maps onto [3.5, 4.5] on AP."""
    impact = standards.epi(standard_context, {"show": 1.0}, 0.5)

    assert _value(standard_context, impact, "AP") == pytest.approx(4.0), (
        "unexpected epi value"
    )


@pytest.mark.parametrize(
    ("new_field", "expected"),
    [pytest.param(True, 2.0, id="new"), pytest.param(False, 1.0, id="existing")],
)
def test_interest_field(
    standard_context: Context,
    standards: Standards,
    *,
    new_field: bool,
    expected: float,
) -> None:
    """New interest fields count double."""
    impact = standards.interest_field(standard_context, {"show": 1.0}, new_field=new_field)

    assert _value(standard_context, impact, "Additional") == expected, (
        "unexpected interest field bonus"
    )


@pytest.mark.parametrize(
    ("duration", "base_type", "expected"),
    [
        pytest.param(dt.timedelta(minutes=5), "tiny", 0.1, id="tiny"),
        pytest.param(dt.timedelta(hours=1), "short", 0.3 * 0.5**0.5, id="short"),
        pytest.param(dt.timedelta(hours=4), "long", 1.0, id="long"),
    ],
)
def test_consumed_duration_buckets(
    standard_context: Context,
    standards: Standards,
    duration: dt.timedelta,
    base_type: str,
    expected: float,
) -> None:
    """Durations are measured against their bucket's base duration."""
    impact = standards.consumed(standard_context, {"show": 1.0}, 1.0, duration)

    assert _value(standard_context, impact, "Boredom") == pytest.approx(expected), (
        "unexpected boredom score"
    )
    assert _source(impact)["consumedArgs"]["baseType"] == base_type, (  # pyright: ignore[reportIndexIssue]
        "unexpected duration bucket"
    )


def test_anime_consumed_uses_average_episode_length(
    standard_context: Context,
    standards: Standards,
) -> None:
    """Twelve average episodes are the long-bucket base."""
    impact = standards.anime_consumed(standard_context, {"show": 1.0}, 0.8, 12)

    assert _value(standard_context, impact, "Boredom") == pytest.approx(0.8), (
        "unexpected boredom score"
    )
    assert _source(impact)["name"] == "animeConsumed", "expected animeConsumed"


def test_anime_consumed_with_explicit_episode_length(
    standard_context: Context,
    standards: Standards,
) -> None:
    """An explicit episode length overrides the average."""
    impact = standards.anime_consumed(
        standard_context,
        {"show": 1.0},
        1.0,
        3,
        dt.timedelta(minutes=2),
    )

    assert _source(impact)["consumedArgs"]["baseType"] == "tiny", (  # pyright: ignore[reportIndexIssue]
        "expected six minutes to be a tiny duration"
    )


@pytest.mark.parametrize(
    "duration",
    [
        pytest.param(dt.timedelta(seconds=-1), id="one-second-negative"),
        pytest.param(dt.timedelta(hours=-3), id="hours-negative"),
    ],
)
def test_consumed_rejects_negative_duration(
    standard_context: Context,
    standards: Standards,
    duration: dt.timedelta,
) -> None:
    """Time spent consuming an entry cannot be negative."""
    with pytest.raises(ExtensionValidationError, match="negative") as excinfo:
        standards.consumed(standard_context, {"show": 1.0}, 1.0, duration)

    assert excinfo.value.extension == "DAH_standards", "expected the extension name"


def test_anime_consumed_rejects_negative_episodes(
    standard_context: Context,
    standards: Standards,
) -> None:
    """An episode count below zero is invalid."""
    with pytest.raises(ExtensionValidationError, match="Episode count"):
        standards.anime_consumed(standard_context, {"show": 1.0}, 1.0, -2)


def test_zero_episodes_score_no_boredom(
    standard_context: Context,
    standards: Standards,
) -> None:
    """Watching nothing produces a zero boredom score."""
    impact = standards.anime_consumed(standard_context, {"show": 1.0}, 1.0, 0)

    assert _value(standard_context, impact, "Boredom") == 0.0, (
        "expected zero boredom"
    )


@pytest.mark.parametrize(
    ("config", "settings", "expected_minutes"),
    [
        pytest.param(None, EngineSettings(), 20.0, id="default"),
        pytest.param(
            {"average_anime_episode_minutes": "24"}, EngineSettings(), 24.0, id="config"
        ),
        pytest.param(
            {"average_anime_episode_minutes": "abc"},
            EngineSettings(average_episode_minutes=30.0),
            30.0,
            id="invalid-config-uses-settings",
        ),
        pytest.param(
            {"average_anime_episode_minutes": -5},
            EngineSettings(),
            20.0,
            id="negative-config-uses-settings",
        ),
    ],
)
def test_average_episode_length_configuration(
    config: dict[str, object] | None,
    settings: EngineSettings,
    expected_minutes: float,
) -> None:
    """Configuration overrides settings; invalid values fall back."""
    standards = Standards(config, settings=settings)

    assert standards.average_episode_duration == dt.timedelta(
        minutes=expected_minutes
    ), f"unexpected episode duration {standards.average_episode_duration!r}"


def test_meme_scales_with_strength_and_days(
    standard_context: Context,
    standards: Standards,
) -> None:
    """A 120-day meme of strength 1 scores 4 on AP."""
    impact = standards.meme(standard_context, {"show": 1.0}, 1.0, _days(120))

    assert _value(standard_context, impact, "AP") == pytest.approx(4.0), (
        "unexpected meme score"
    )


@pytest.mark.parametrize(
    "strength",
    [pytest.param(-0.1, id="negative"), pytest.param(2.0, id="upper-bound")],
)
def test_meme_rejects_strength_outside_range(
    standard_context: Context,
    standards: Standards,
    strength: float,
) -> None:
    """Meme strength must lie in [0, 2)."""
    with pytest.raises(ExtensionValidationError, match="not in"):
        standards.meme(standard_context, {"show": 1.0}, strength, _days(1))


@pytest.mark.parametrize(
    ("visual_type", "expected"),
    [
        pytest.param(VisualType.ANIMATED, 2.0, id="animated"),
        pytest.param(VisualType.ALBUM_ART, 0.5, id="album-art"),
    ],
)
def test_visual_scales_by_type(
    standard_context: Context,
    standards: Standards,
    visual_type: VisualType,
    expected: float,
) -> None:
    """Visual scores are weighted by the media type."""
    impact = standards.visual(standard_context, {"show": 1.0}, visual_type, 1.0, 1.0)

    assert _value(standard_context, impact, "AV") == pytest.approx(expected), (
        "unexpected visual score"
    )
    assert _source(impact)["visualArgs"]["visualType"] == visual_type.label, (  # pyright: ignore[reportIndexIssue]
        "expected the visual type label in provenance"
    )


def test_music_and_additional(standard_context: Context, standards: Standards) -> None:
    """Music lands on AM and free-form bonuses on Additional."""
    music = standards.music(standard_context, {"show": 1.0}, 0.5)
    additional = standards.additional(standard_context, {"show": 1.0}, 1.5, "cosplay")

    assert _value(standard_context, music, "AM") == 0.5, "unexpected music score"
    assert _value(standard_context, additional, "Additional") == 1.5, (
        "unexpected additional score"
    )
    assert _source(additional)["additionalArgs"] == {"description": "cosplay"}, (
        "expected the description in provenance"
    )


def test_osu_song(standard_context: Context, standards: Standards) -> None:
    """Personal and community factors add up on AP."""
    impact = standards.osu_song(standard_context, {"song": 1.0}, 1.0, 1.0)

    assert _value(standard_context, impact, "AP") == pytest.approx(0.7), (
        "unexpected osu song score"
    )


def test_feature_music_relation(standard_context: Context, standards: Standards) -> None:
    """Featured music passes a fifth of the reference's music score."""
    relation = standards.feature_music(standard_context, {"show": 1.0}, "song")

    matrix = relation.references["song"]
    assert isinstance(matrix, DiagonalMatrix), "expected a diagonal matrix"
    assert float(matrix.data[standard_context.factor("AM").index]) == 0.2, (
        "expected 0.2 on AM"
    )
    assert float(matrix.data.sum()) == pytest.approx(0.2), "expected only AM set"
    assert _source(relation)["name"] == "featureMusic", "expected provenance"


def test_killed_by_profile_scales(standard_context: Context, standards: Standards) -> None:
    """The overshadowing profile is scaled by potential and effect."""
    relation = standards.killed_by(standard_context, {"show": 1.0}, "rival", 0.5, 0.5)

    matrix = relation.references["rival"]
    assert isinstance(matrix, DiagonalMatrix), "expected a diagonal matrix"
    assert float(matrix.data[standard_context.factor("AP").index]) == pytest.approx(
        0.1
    ), "expected 0.2 * 0.5 on AP"
    assert float(matrix.data[standard_context.factor("AV").index]) == 0.0, (
        "expected no visual share"
    )


@pytest.mark.parametrize(
    ("method", "expected"),
    [pytest.param("remix", 0.2, id="remix"), pytest.param("gate_open", 0.0, id="gate")],
)
def test_scalar_relations(
    standard_context: Context,
    standards: Standards,
    method: str,
    expected: float,
) -> None:
    """Scalar relations scale every factor equally."""
    relation = getattr(standards, method)(standard_context, {"show": 1.0}, "other")

    matrix = relation.references["other"]
    assert isinstance(matrix, DiagonalMatrix), "expected a diagonal matrix"
    assert set(matrix.data.tolist()) == {expected}, f"unexpected data {matrix.data!r}"


def test_from_to_period_length() -> None:
    """Periods measure the time between their bounds."""
    start = dt.datetime(2024, 1, 1, tzinfo=dt.UTC)
    period = FromToPeriod(start, start + dt.timedelta(days=3))

    total = periods_length([period, DurationPeriod(dt.timedelta(days=2))])

    assert period.length == dt.timedelta(days=3), "unexpected period length"
    assert total == dt.timedelta(days=5), "unexpected total length"


def test_from_to_period_rejects_reversed_bounds() -> None:
    """A period cannot end before it starts."""
    start = dt.datetime(2024, 1, 2, tzinfo=dt.UTC)

    with pytest.raises(ExtensionValidationError, match="before it starts"):
        FromToPeriod(start, start - dt.timedelta(hours=1))


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        pytest.param(0.0, 10.0, id="lower-bound"),
        pytest.param(0.25, 12.5, id="quarter"),
        pytest.param(1.0, 20.0, id="upper-bound"),
    ],
)
def test_map_clamp_maps_linearly(value: float, expected: float) -> None:
    """Values inside the input range map linearly."""
    result = map_clamp(value, 0.0, 1.0, 10.0, 20.0)

    assert result == pytest.approx(expected), f"expected {expected!r}, got {result!r}"


def test_map_clamp_rejects_out_of_range_values() -> None:
    """Values outside the input range are an error rather than clamped."""
    with pytest.raises(ExtensionValidationError, match="outside"):
        map_clamp(-0.5, 0.0, 1.0, 10.0, 20.0)


def test_repeated_impacts_on_one_entry_diminish(
    standard_context: Context,
    standards: Standards,
) -> None:
    """Two politics impacts on one show add less than twice the score."""
    impacts = [
        standards.politics(standard_context, {"show": 1.0}),
        standards.politics(standard_context, {"show": 1.0}),
    ]

    result = aggregate(
        standard_context, Data.from_entries([Entry("show")], impacts=impacts)
    )
    additional = float(result.score("show")[standard_context.factor("Additional").index])

    assert 0.75 < additional < 1.5, f"expected diminishing returns, got {additional!r}"
    assert additional == pytest.approx(0.75 + 0.75 * 0.95), (
        f"unexpected additional score {additional!r}"
    )
