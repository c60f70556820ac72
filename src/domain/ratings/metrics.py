"""Per-participant performance metric extraction and normalization."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from math import log

from domain.common import ParticipantRecord

DRAGON_WEIGHT = 3.0
BARON_WEIGHT = 5.0
TURRET_WEIGHT = 2.0
INHIBITOR_WEIGHT = 4.0

STAT_KEYS = ("kda", "damage", "vision", "objectives", "farm", "survival", "utility")

MIN_PERFORMANCE_SCORE = 0.0
MAX_PERFORMANCE_SCORE = 2.0


@dataclass(frozen=True)
class PerformanceMetrics:
    """Normalized metric bundle for one participant in one match."""

    kda: float
    kda_raw: float
    kill_participation: float
    damage_per_minute: float
    vision_score_per_minute: float
    cs_per_minute: float
    gold_per_minute: float
    wards_placed: int
    wards_cleared: int
    turret_damage: float
    objective_participation: float
    survival_rate: float
    utility_score: float
    early_game_performance: float
    late_game_performance: float
    team_fight_participation: float
    solo_kills: float
    comeback_factor: float
    match_share: float


def extract_performance_metrics(
    participant: ParticipantRecord,
    avg_match_duration_seconds: float | None = None,
) -> PerformanceMetrics:
    """Derive the metric bundle for one participant.

    Pure function of its inputs. Missing counters are zero; per-minute
    rates use at least one minute of play time.
    """
    time_minutes = max(1.0, (participant.time_played or 1.0) / 60.0)
    takedowns = participant.kills + participant.assists
    if participant.deaths > 0:
        kda = takedowns / participant.deaths
    else:
        kda = float(takedowns or 1)

    if avg_match_duration_seconds and avg_match_duration_seconds > 0.0:
        match_share = participant.time_played / avg_match_duration_seconds
    else:
        match_share = 1.0

    return PerformanceMetrics(
        kda=kda,
        kda_raw=float(takedowns - participant.deaths),
        kill_participation=participant.challenge("killParticipation"),
        damage_per_minute=participant.total_damage_dealt_to_champions / time_minutes,
        vision_score_per_minute=participant.vision_score / time_minutes,
        cs_per_minute=participant.total_minions_killed / time_minutes,
        gold_per_minute=participant.gold_earned / time_minutes,
        wards_placed=participant.wards_placed,
        wards_cleared=participant.wards_killed,
        turret_damage=participant.damage_dealt_to_turrets,
        objective_participation=objective_participation(participant),
        survival_rate=time_minutes / max(1, participant.deaths),
        utility_score=utility_score(participant),
        early_game_performance=early_game_performance(participant),
        late_game_performance=late_game_performance(participant),
        team_fight_participation=team_fight_participation(participant),
        solo_kills=participant.challenge("soloKills"),
        comeback_factor=comeback_factor(participant),
        match_share=match_share,
    )


def objective_participation(participant: ParticipantRecord) -> float:
    return (
        participant.dragon_kills * DRAGON_WEIGHT
        + participant.baron_kills * BARON_WEIGHT
        + participant.turret_kills * TURRET_WEIGHT
        + participant.inhibitor_kills * INHIBITOR_WEIGHT
    )


def utility_score(participant: ParticipantRecord) -> float:
    return (
        participant.challenge("effectiveHealAndShielding") / 100.0
        + participant.challenge("enemyChampionImmobilizations") * 2.0
        + participant.vision_score
    )


def early_game_performance(participant: ParticipantRecord) -> float:
    first_blood = (10.0 if participant.first_blood_kill else 0.0) + (
        5.0 if participant.first_blood_assist else 0.0
    )
    return (
        participant.challenge("killsNearEnemyTurret") * 3.0
        + participant.challenge("laneMinionsFirst10Minutes") / 10.0
        + first_blood
    )


def late_game_performance(participant: ParticipantRecord) -> float:
    return (
        participant.challenge("killsAfterHiddenWithAlly") * 2.0
        + participant.challenge("teamDamagePercentage") * 50.0
    )


def team_fight_participation(participant: ParticipantRecord) -> float:
    multikills = (
        participant.double_kills * 2
        + participant.triple_kills * 4
        + participant.quadra_kills * 8
        + participant.penta_kills * 16
    )
    return multikills + participant.challenge("killsInAllLanes")


def comeback_factor(participant: ParticipantRecord) -> float:
    gold_deficit = participant.challenge("maxGoldDeficit")
    if gold_deficit > 1000.0:
        return log(gold_deficit / 1000.0)
    return 0.0


def normalize_stat(stat_key: str, metrics: PerformanceMetrics) -> float:
    """Scale one stat so that a typical game lands near 1.0."""
    if stat_key == "damage":
        return metrics.damage_per_minute / 500.0
    if stat_key == "farm":
        return metrics.cs_per_minute / 8.0
    if stat_key == "kda":
        return min(metrics.kda / 3.0, 2.0)
    if stat_key == "vision":
        return metrics.vision_score_per_minute / 2.0
    if stat_key == "objectives":
        return metrics.objective_participation / 10.0
    if stat_key == "survival":
        return min(metrics.survival_rate / 10.0, 2.0)
    if stat_key == "utility":
        return metrics.utility_score / 50.0
    raise ValueError(f"Unknown stat key: {stat_key!r}; expected one of {STAT_KEYS}")


def weighted_stat_score(metrics: PerformanceMetrics, weights: Mapping[str, float]) -> float:
    return sum(weight * normalize_stat(stat_key, metrics) for stat_key, weight in weights.items())


def performance_score(metrics: PerformanceMetrics, weights: Mapping[str, float]) -> float:
    """Composite performance score, clamped to [0, 2] with 1.0 as an average game."""
    score = weighted_stat_score(metrics, weights)
    return max(MIN_PERFORMANCE_SCORE, min(MAX_PERFORMANCE_SCORE, score))


__all__ = [
    "PerformanceMetrics",
    "STAT_KEYS",
    "extract_performance_metrics",
    "normalize_stat",
    "performance_score",
    "weighted_stat_score",
]
