"""Standard impact and relation heuristics.

This extension turns real-world events (crying at an episode, watching a
number of episodes, a long-running meme, a song featured in a show) into
``Impact`` and ``Relation`` values. Every value carries provenance under
``dah_meta["DAH_ir_source"]`` naming the heuristic and its arguments.

Contributors are given as ``{entry id: strength}`` and become scalar
diagonal matrices. Emotions are given as ``(factor name, weight)`` pairs.

Examples
--------
>>> standards = Standards()
>>> impact = standards.cry(context, {"show": 1.0}, [("CP", 1.0), ("MP", 0.5)])
>>> relation = standards.feature_music(context, {"show": 1.0}, "opening")
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import enum
import typing as typ

from dah._coercion import coerce_positive_float
from dah.config import settings_from_environment
from dah.errors import ExtensionValidationError
from dah.scoring.combine import combine
from dah.scoring.domain import Impact, Relation
from dah.scoring.factors import new_zero_vector
from dah.scoring.linalg import diagonal_matrix, scalar_matrix

from .factors import ADDITIONAL, BOREDOM

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from dah.config import EngineSettings
    from dah.scoring.domain import Id, JsonMapping
    from dah.scoring.factors import Context
    from dah.scoring.linalg import Matrix, Vector

type WeightedEmotions = cabc.Sequence[tuple[str, float]]
type Contributors = cabc.Mapping[Id, float]

EXTENSION_NAME = "DAH_standards"
EXTENSION_VERSION = "1.1.1"

_ONE_DAY = dt.timedelta(days=1)

#: Per-factor share of the referenced score passed on by ``killed_by``.
_KILLED_BY_PROFILE: dict[str, float] = {
    "AP": 0.2,
    "AU": 0.1,
    "CP": 0.05,
    "CU": 0.05,
    "MP": 0.2,
    "MU": 0.1,
    "AV": 0.0,
    "AL": 0.1,
    "AM": 0.1,
    BOREDOM: 0.1,
    ADDITIONAL: 0.0,
}


class Sign(enum.IntEnum):
    """Direction of an emotional impact."""

    POSITIVE = 1
    NEGATIVE = -1


class VisualType(enum.Enum):
    """Kinds of visual media with their relative visual weight."""

    ANIMATED = ("animated", 1.0)
    RPG_3D_GAME = ("rpg3dGame", 1.0)
    ANIMATED_SHORT = ("animatedShort", 0.8)
    ANIMATED_MV = ("animatedMV", 0.8)
    VISUAL_NOVEL = ("visualNovel", 0.8)
    MANGA = ("manga", 0.8)
    ANIMATED_GACHA_CARD_ART = ("animatedGachaCardArt", 0.7)
    GACHA_CARD_ART = ("gachaCardArt", 0.6)
    LIGHT_NOVEL = ("lightNovel", 0.5)
    SEMI_ANIMATED_MV = ("semiAnimatedMV", 0.5)
    STATIC_MV = ("staticMV", 0.3)
    ALBUM_ART = ("albumArt", 0.25)

    def __init__(self, label: str, factor: float) -> None:
        self.label = label
        self.factor = factor


@dc.dataclass(frozen=True, slots=True)
class FromToPeriod:
    """A period between two instants."""

    start: dt.datetime
    end: dt.datetime

    def __post_init__(self) -> None:
        if self.end < self.start:
            msg = f"Period ends ({self.end}) before it starts ({self.start})."
            raise ExtensionValidationError(msg, extension=EXTENSION_NAME)

    @property
    def length(self) -> dt.timedelta:
        """Time between ``start`` and ``end``."""
        return self.end - self.start


@dc.dataclass(frozen=True, slots=True)
class DurationPeriod:
    """A period known only by its length."""

    length: dt.timedelta


type DatePeriod = FromToPeriod | DurationPeriod


def periods_length(periods: cabc.Iterable[DatePeriod]) -> dt.timedelta:
    """Return the total length of ``periods``."""
    return sum((period.length for period in periods), dt.timedelta())


def _period_meta(period: DatePeriod) -> JsonMapping:
    match period:
        case FromToPeriod(start=start, end=end):
            return {
                "type": "fromto",
                "from": start.isoformat(),
                "to": end.isoformat(),
                "seconds": period.length.total_seconds(),
            }
        case DurationPeriod(length=length):
            return {"type": "duration", "seconds": length.total_seconds()}
    msg = f"Unsupported period type {type(period).__name__}."
    raise TypeError(msg)


def map_clamp(
    value: float,
    in_min: float,
    in_max: float,
    out_min: float,
    out_max: float,
) -> float:
    """Map ``value`` linearly from ``[in_min, in_max]`` onto ``[out_min, out_max]``.

    Raises
    ------
    ExtensionValidationError
        If ``value`` lies outside ``[in_min, in_max]``.
    """
    position = (value - in_min) / (in_max - in_min)
    if not 0.0 <= position <= 1.0:
        msg = f"Value {value} is outside the [{in_min}, {in_max}] range."
        raise ExtensionValidationError(msg, extension=EXTENSION_NAME)
    return out_min + (out_max - out_min) * position


def _edges(context: Context, contributors: Contributors) -> dict[Id, Matrix]:
    return {
        entry_id: scalar_matrix(context, strength)
        for entry_id, strength in contributors.items()
    }


class Standards:
    """Reference heuristics for building impacts and relations.

    Parameters
    ----------
    config : JsonMapping | None
        Optional overrides. ``"average_anime_episode_minutes"`` sets the
        default episode length used by ``consumed`` and ``anime_consumed``.
    settings : EngineSettings | None
        Runtime settings supplying the fallback episode length; read from
        the environment when omitted.
    """

    name = EXTENSION_NAME
    version = EXTENSION_VERSION

    def __init__(
        self,
        config: JsonMapping | None = None,
        *,
        settings: EngineSettings | None = None,
    ) -> None:
        runtime = settings if settings is not None else settings_from_environment()
        options = config or {}
        minutes = coerce_positive_float(
            options.get("average_anime_episode_minutes"),
            runtime.average_episode_minutes,
        )
        self.average_episode_duration = dt.timedelta(minutes=minutes)

    def dependencies(self) -> tuple[str, ...]:  # noqa: PLR6301
        """Return the factor catalog this extension scores against."""
        return ("DAH_factors",)

    def contribute(self, context: Context) -> tuple[Impact | Relation, ...]:  # noqa: ARG002, PLR6301
        """Return nothing; heuristics are invoked directly by catalogs."""
        return ()

    def _meta(self, name: str, **args: object) -> JsonMapping:
        return {
            "DAH_ir_source": {
                "extension": self.name,
                "version": self.version,
                "name": name,
                **args,
            },
        }

    def _invalid(self, message: str) -> ExtensionValidationError:
        return ExtensionValidationError(message, extension=self.name)

    def _emotion_vector(
        self,
        context: Context,
        base: float,
        emotions: WeightedEmotions,
    ) -> Vector:
        if not emotions:
            msg = "Emotion impacts need at least one emotion."
            raise self._invalid(msg)
        weighted = [(context.factor(name), weight) for name, weight in emotions]
        for factor, weight in weighted:
            if weight <= 0.0:
                msg = f"Emotion {factor.name!r} has non-positive weight {weight}."
                raise self._invalid(msg)
        combined = combine(
            context,
            [weight for _, weight in weighted],
            lambda position: weighted[position][0].subscore_weight,
        )
        vector = new_zero_vector(context)
        for factor, weight in weighted:
            vector[factor.index] = base * weight**0.9 / combined
        return vector

    def _single(
        self,
        context: Context,
        contributors: Contributors,
        factor_name: str,
        value: float,
        name: str,
        **args: object,
    ) -> Impact:
        return Impact(
            contributors=_edges(context, contributors),
            score=context.vector({factor_name: value}),
            dah_meta=self._meta(name, **args),
        )

    def emotion(
        self,
        context: Context,
        contributors: Contributors,
        base: float,
        emotions: WeightedEmotions,
        name: str = "emotion",
        meta: JsonMapping | None = None,
    ) -> Impact:
        """Build an impact spreading ``base`` across weighted emotions.

        Each emotion receives ``base * weight ** 0.9`` divided by the
        combined emotion weights, so several emotions share the base rather
        than multiplying it.

        Raises
        ------
        ExtensionValidationError
            If ``emotions`` is empty or a weight is not positive.
        UnknownFactorError
            If an emotion names a factor missing from ``context``.
        """
        return Impact(
            contributors=_edges(context, contributors),
            score=self._emotion_vector(context, base, emotions),
            dah_meta=self._meta(
                name,
                emotionArgs={"base": base, "emotions": dict(emotions)},
                **(meta or {}),
            ),
        )

    def cry(
        self,
        context: Context,
        contributors: Contributors,
        emotions: WeightedEmotions,
    ) -> Impact:
        """Crying: a strong emotional impact."""
        return self.emotion(context, contributors, 4.0, emotions, "cry")

    def pads(
        self,
        context: Context,
        contributors: Contributors,
        periods: cabc.Sequence[DatePeriod],
        emotions: WeightedEmotions,
    ) -> Impact:
        """Post-experience emotional aftermath lasting ``periods``.

        The base grows with the total length in days, capped at ten days.
        """
        duration = periods_length(periods)
        days = duration / _ONE_DAY
        base = 0.3 * min(10.0, days) ** 1.3
        return self.emotion(
            context,
            contributors,
            base,
            emotions,
            "pads",
            {
                "padsArgs": {
                    "seconds": duration.total_seconds(),
                    "days": days,
                    "periods": [_period_meta(period) for period in periods],
                },
            },
        )

    def _xei(
        self,
        context: Context,
        contributors: Contributors,
        name: str,
        factor: float,
        sign: Sign,
        base: float,
        emotions: WeightedEmotions,
    ) -> Impact:
        return self.emotion(
            context,
            contributors,
            base,
            emotions,
            name,
            {
                "xeiArgs": {
                    "factor": factor,
                    "sign": "positive" if sign > 0 else "negative",
                },
            },
        )

    def aei(
        self,
        context: Context,
        contributors: Contributors,
        factor: float,
        sign: Sign,
        emotions: WeightedEmotions,
    ) -> Impact:
        """Absolute emotional impact; ``|factor|`` in ``[0, 1]`` maps to 2-3."""
        base = map_clamp(abs(factor), 0.0, 1.0, 2.0, 3.0) * sign
        return self._xei(context, contributors, "aei", factor, sign, base, emotions)

    def nei(
        self,
        context: Context,
        contributors: Contributors,
        factor: float,
        sign: Sign,
        emotions: WeightedEmotions,
    ) -> Impact:
        """Normal emotional impact; ``|factor|`` in ``[0, 1]`` maps to 0-2."""
        base = map_clamp(abs(factor), 0.0, 1.0, 0.0, 2.0) * sign
        return self._xei(context, contributors, "nei", factor, sign, base, emotions)

    def max_aei_pads(
        self,
        context: Context,
        contributors: Contributors,
        periods: cabc.Sequence[DatePeriod],
        emotions: WeightedEmotions,
    ) -> list[Impact]:
        """A maximal positive ``aei`` together with its ``pads``."""
        return [
            self.aei(context, contributors, 1.0, Sign.POSITIVE, emotions),
            self.pads(context, contributors, periods, emotions),
        ]

    def cry_pads(
        self,
        context: Context,
        contributors: Contributors,
        periods: cabc.Sequence[DatePeriod],
        emotions: WeightedEmotions,
    ) -> list[Impact]:
        """A ``cry`` together with its ``pads``."""
        return [
            self.cry(context, contributors, emotions),
            self.pads(context, contributors, periods, emotions),
        ]

    def waifu(
        self,
        context: Context,
        contributors: Contributors,
        waifu: str,
        periods: cabc.Sequence[DatePeriod],
    ) -> Impact:
        """Attachment to a character over ``periods``, scored on MP."""
        duration = periods_length(periods)
        days = duration / _ONE_DAY
        base = 1.2 * (days / 90.0) ** context.factor("MP").factor_weight
        return self.emotion(
            context,
            contributors,
            base,
            [("MP", 1.0)],
            "waifu",
            {
                "waifuArgs": {
                    "waifu": waifu,
                    "seconds": duration.total_seconds(),
                    "days": days,
                    "periods": [_period_meta(period) for period in periods],
                },
            },
        )

    def ehi(self, context: Context, contributors: Contributors) -> Impact:
        return self.emotion(context, contributors, 3.5, [("AP", 1.0)], "ehi")

    def epi(
        self,
        context: Context,
        contributors: Contributors,
        factor: float,
    ) -> Impact:
        """``factor`` in ``[0, 1]`` maps to a base of 3.5-4.5 on AP."""
        base = map_clamp(factor, 0.0, 1.0, 3.5, 4.5)
        return self.emotion(
            context,
            contributors,
            base,
            [("AP", 1.0)],
            "epi",
            {"epiArgs": {"factor": factor}},
        )

    def jumpscare(self, context: Context, contributors: Contributors) -> Impact:
        return self.emotion(context, contributors, 1.0, [("MP", 1.0)], "jumpscare")

    def sleepless_night(self, context: Context, contributors: Contributors) -> Impact:
        return self.emotion(
            context, contributors, 4.0, [("MP", 1.0)], "sleeplessNight"
        )

    def politics(self, context: Context, contributors: Contributors) -> Impact:
        return self._single(context, contributors, ADDITIONAL, 0.75, "politics")

    def interest_field(
        self,
        context: Context,
        contributors: Contributors,
        *,
        new_field: bool,
    ) -> Impact:
        """Opened an interest field; a brand-new field counts double."""
        return self._single(
            context,
            contributors,
            ADDITIONAL,
            2.0 if new_field else 1.0,
            "interestField",
        )

    def consumed(
        self,
        context: Context,
        contributors: Contributors,
        boredom: float,
        duration: dt.timedelta,
        name: str = "consumed",
        meta: JsonMapping | None = None,
    ) -> Impact:
        """Boredom from time spent consuming an entry.

        Durations under ten minutes are measured against five minutes, under
        two hours against two hours, and anything longer against twelve
        average episodes.
        """
        if duration < dt.timedelta(0):
            msg = f"Consumption duration {duration} is negative."
            raise self._invalid(msg)
        if duration < dt.timedelta(minutes=10):
            base_type, base_score = "tiny", 0.1
            base_duration = dt.timedelta(minutes=5)
        elif duration < dt.timedelta(hours=2):
            base_type, base_score = "short", 0.3
            base_duration = dt.timedelta(hours=2)
        else:
            base_type, base_score = "long", 1.0
            base_duration = self.average_episode_duration * 12

        ratio = duration / base_duration
        boredom_score = (
            boredom * base_score * ratio ** context.factor(BOREDOM).factor_weight
        )
        return self._single(
            context,
            contributors,
            BOREDOM,
            boredom_score,
            name,
            consumedArgs={
                "boredom": boredom,
                "seconds": duration.total_seconds(),
                "baseType": base_type,
                "baseScore": base_score,
                "baseSeconds": base_duration.total_seconds(),
                "ratio": ratio,
            },
            **(meta or {}),
        )

    def anime_consumed(
        self,
        context: Context,
        contributors: Contributors,
        boredom: float,
        episodes: int,
        episode_duration: dt.timedelta | None = None,
    ) -> Impact:
        """``consumed`` for ``episodes`` episodes of ``episode_duration``."""
        if episodes < 0:
            msg = f"Episode count {episodes} is negative."
            raise self._invalid(msg)
        length = (
            episode_duration
            if episode_duration is not None
            else self.average_episode_duration
        )
        return self.consumed(
            context,
            contributors,
            boredom,
            length * episodes,
            "animeConsumed",
            {
                "animeConsumedArgs": {
                    "episodes": episodes,
                    "episodeSeconds": length.total_seconds(),
                },
            },
        )

    def dropped(self, context: Context, contributors: Contributors) -> Impact:
        return self._single(context, contributors, BOREDOM, -0.5, "dropped")

    def meme(
        self,
        context: Context,
        contributors: Contributors,
        strength: float,
        periods: cabc.Sequence[DatePeriod],
    ) -> Impact:
        """A meme of ``strength`` in ``[0, 2)`` that lasted ``periods``.

        Raises
        ------
        ExtensionValidationError
            If ``strength`` is outside ``[0, 2)``.
        """
        if strength < 0.0 or strength >= 2.0:
            msg = f"strength={strength} not in [0, 2) range"
            raise self._invalid(msg)
        duration = periods_length(periods)
        days = duration / _ONE_DAY
        base = strength * (days / 120.0) ** context.factor("AP").factor_weight * 4.0
        return self.emotion(
            context,
            contributors,
            base,
            [("AP", 1.0)],
            "meme",
            {
                "memeArgs": {
                    "strength": strength,
                    "seconds": duration.total_seconds(),
                    "periods": [_period_meta(period) for period in periods],
                },
            },
        )

    def additional(
        self,
        context: Context,
        contributors: Contributors,
        value: float,
        description: str,
    ) -> Impact:
        return self._single(
            context,
            contributors,
            ADDITIONAL,
            value,
            "additional",
            additionalArgs={"description": description},
        )

    def music(
        self,
        context: Context,
        contributors: Contributors,
        music_base: float,
    ) -> Impact:
        """Music score on AM; 0.5 is a memorable insert song."""
        return self._single(
            context,
            contributors,
            "AM",
            music_base,
            "music",
            musicArgs={"musicBase": music_base},
        )

    def visual(
        self,
        context: Context,
        contributors: Contributors,
        visual_type: VisualType,
        base: float,
        unique: float,
    ) -> Impact:
        """Visual score on AV, scaled by uniqueness and the media type."""
        visual_score = base * (unique + 2.0) / 3.0 * visual_type.factor * 2.0
        return self._single(
            context,
            contributors,
            "AV",
            visual_score,
            "visual",
            visualArgs={
                "visualType": visual_type.label,
                "base": base,
                "unique": unique,
            },
        )

    def osu_song(
        self,
        context: Context,
        contributors: Contributors,
        personal: float,
        community: float,
    ) -> Impact:
        """A rhythm-game song; personal and community factors are in [0, 1]."""
        personal_factor = map_clamp(personal, 0.0, 1.0, 0.0, 0.5)
        community_factor = map_clamp(community, 0.0, 1.0, 0.0, 0.2)
        return self._single(
            context,
            contributors,
            "AP",
            personal_factor + community_factor,
            "osuSong",
            personal=personal,
            community=community,
        )

    def _relation(
        self,
        context: Context,
        contributors: Contributors,
        reference: Id,
        matrix: Matrix,
        name: str,
    ) -> Relation:
        return Relation(
            contributors=_edges(context, contributors),
            references={reference: matrix},
            dah_meta=self._meta(name),
        )

    def feature_music(
        self,
        context: Context,
        contributors: Contributors,
        reference: Id,
    ) -> Relation:
        """Contributors feature the music of ``reference``."""
        return self._relation(
            context,
            contributors,
            reference,
            diagonal_matrix(context, {"AM": 0.2}),
            "featureMusic",
        )

    def remix(
        self,
        context: Context,
        contributors: Contributors,
        reference: Id,
    ) -> Relation:
        """Contributors remix ``reference``."""
        return self._relation(
            context, contributors, reference, scalar_matrix(context, 0.2), "remix"
        )

    def killed_by(
        self,
        context: Context,
        contributors: Contributors,
        reference: Id,
        potential: float,
        effect: float,
    ) -> Relation:
        """Contributors were overshadowed by ``reference``."""
        scale = potential * effect * 2.0
        return self._relation(
            context,
            contributors,
            reference,
            diagonal_matrix(
                context,
                {name: share * scale for name, share in _KILLED_BY_PROFILE.items()},
            ),
            "killedBy",
        )

    def gate_open(
        self,
        context: Context,
        contributors: Contributors,
        reference: Id,
    ) -> Relation:
        """Contributors opened the way to ``reference``; carries no score."""
        return self._relation(
            context, contributors, reference, scalar_matrix(context, 0.0), "gateOpen"
        )


__all__ = [
    "EXTENSION_NAME",
    "Contributors",
    "DatePeriod",
    "DurationPeriod",
    "FromToPeriod",
    "Sign",
    "Standards",
    "VisualType",
    "WeightedEmotions",
    "map_clamp",
    "periods_length",
]
