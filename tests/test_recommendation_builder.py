"""Tests for recommendation records and slot summaries."""

from conftest import MONDAY, at, monday_history
from slot_engine.models.entities import Participant, PatternStats, RecommendationType
from slot_engine.services.availability import CalendarAvailabilityProbe, attach_availability
from slot_engine.services.pattern_analyzer import PatternAnalyzer
from slot_engine.services.recommendation_builder import (
    RecommendationBuilder,
    best_day_of_week,
    best_time_of_day,
)
from slot_engine.services.response_formatter import ResponseFormatter
from slot_engine.services.slot_generator import SlotGenerator
from slot_engine.services.slot_ranker import SlotRanker


def ranked_monday(policy, stats=None, participants=(), probe=None):
    slots = SlotGenerator().generate_slots(MONDAY, MONDAY, 60, policy, [])
    if probe is not None:
        slots = attach_availability(slots, list(participants), probe)
    return SlotRanker(policy).rank(slots, stats or PatternStats(), list(participants) or None)


def test_empty_ranking_gives_no_recommendations():
    assert RecommendationBuilder().build([]) == []


def test_optimal_alternatives_and_insight(policy):
    ranked = ranked_monday(policy)
    recs = RecommendationBuilder().build(ranked)

    assert [r.type for r in recs] == [
        RecommendationType.OPTIMAL,
        RecommendationType.ALTERNATIVES,
        RecommendationType.INSIGHT,
    ]
    assert [r.priority for r in recs] == [1, 2, 3]

    optimal = recs[0]
    assert optimal.slot is ranked[0]
    assert optimal.description == "Monday, October 19 at 10:00"
    assert optimal.reason.startswith("Score: 78.0/100")

    assert recs[1].slots == ranked[1:4]
    assert recs[1].description == "3 other good options available"

    assert recs[2].description == "Morning (10 AM-12 PM) typically has the highest success rate"
    assert recs[2].reason == ""


def test_single_slot_has_no_alternatives(policy):
    ranked = ranked_monday(policy)[:1]
    types = [r.type for r in RecommendationBuilder().build(ranked)]
    assert RecommendationType.ALTERNATIVES not in types


def test_insight_mentions_history(policy):
    stats = PatternAnalyzer(policy.tz).analyze(monday_history())
    recs = RecommendationBuilder().build(ranked_monday(policy, stats), stats)

    insight = next(r for r in recs if r.type == RecommendationType.INSIGHT)
    assert insight.reason == "Based on 4 historical meeting(s); highest completion rate: Morning (10 AM-12 PM)"


def test_limited_availability_warning(policy):
    participants = [Participant("a", "Asha"), Participant("b", "Bikash")]
    probe = CalendarAvailabilityProbe(tz=policy.tz)
    probe.add_busy("b", at(MONDAY, 9), at(MONDAY, 15), "Panel review")

    recs = RecommendationBuilder().build(ranked_monday(policy, participants=participants, probe=probe))

    warning = recs[-1]
    assert warning.type == RecommendationType.WARNING
    assert warning.title == "Limited Availability"
    assert warning.priority == 4


def test_no_warning_when_everyone_is_free(policy, empty_probe):
    participants = [Participant("a", "Asha")]
    recs = RecommendationBuilder().build(ranked_monday(policy, participants=participants, probe=empty_probe))
    assert all(r.type != RecommendationType.WARNING for r in recs)


def test_empty_notice():
    (notice,) = RecommendationBuilder().build_empty_notice()
    assert notice.type == RecommendationType.WARNING
    assert notice.title == "No Available Time Slots"


def test_best_time_and_day(policy):
    ranked = ranked_monday(policy)
    assert best_time_of_day(ranked) == "Morning (10 AM-12 PM)"
    assert best_day_of_week(ranked) == "Monday"
    assert best_time_of_day([]) is None
    assert best_day_of_week([]) is None


def test_formatted_recommendations_are_ordered_by_priority(policy):
    recs = RecommendationBuilder().build(ranked_monday(policy))
    text = ResponseFormatter.format_recommendations(list(reversed(recs)))

    lines = text.splitlines()
    assert lines[0].startswith("[optimal] Optimal Time Slot")
    assert "Good - Suitable option" in text
