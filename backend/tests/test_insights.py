"""
Tests for the rule-based observations.
"""
from app.services.reporting import DEFAULT_OBSERVATION, RuleBasedInsights

from conftest import at, make_response, make_route, make_stop


def visited(index: int, arrive: int, depart: int):
    return make_stop(index, "completed", arrived_at=at(arrive), departed_at=at(depart))


def observe(stops, responses=(), **route):
    return RuleBasedInsights().generate(make_route(**route), list(stops), list(responses))


class TestCompletionObservations:
    def test_all_completed(self):
        observations = observe([visited(0, 0, 10), visited(1, 20, 30)])

        assert observations[0] == "All scheduled stops were successfully completed."

    def test_strong_completion(self):
        stops = [visited(i, i * 20, i * 20 + 10) for i in range(4)] + [make_stop(4, "pending")]

        observations = observe(stops)

        assert "Strong completion rate of 80% with 1 stop(s) remaining." in observations

    def test_low_completion(self):
        stops = [visited(0, 0, 10)] + [make_stop(i, "pending") for i in range(1, 4)]

        observations = observe(stops)

        assert "Completion rate of 25% indicates potential scheduling or access issues." in observations

    def test_middle_completion_has_no_observation(self):
        stops = [visited(i, i * 20, i * 20 + 10) for i in range(3)] + [make_stop(i, "pending") for i in (3, 4)]

        observations = observe(stops)

        assert not any("completion" in o.lower() or "All scheduled" in o for o in observations)

    def test_no_stops_gives_default(self):
        assert observe([]) == [DEFAULT_OBSERVATION]


class TestTimingObservations:
    def test_quick_visits(self):
        observations = observe([visited(0, 0, 3), visited(1, 10, 14)])

        assert (
            "Average stop time was under 5 minutes, indicating efficient visits or quick tasks."
            in observations
        )

    def test_extended_visits(self):
        observations = observe([visited(0, 0, 40), visited(1, 60, 110)])

        assert "Average stop time of 45 minutes suggests complex or extended interactions." in observations

    def test_outlier(self):
        stops = [visited(0, 0, 10), visited(1, 20, 30), visited(2, 40, 50), visited(3, 60, 110)]

        observations = observe(stops)

        assert (
            "One or more stops took significantly longer than average (50 min vs 20 min average)."
            in observations
        )


class TestAnswerObservations:
    def test_no_issues(self):
        observations = observe(
            [visited(0, 0, 10)],
            [make_response("stop-0", "Any issues found?", "yesNo", False)],
        )

        assert "No issues were reported during today's visits." in observations

    def test_high_issue_rate(self):
        stops = [visited(0, 0, 10), visited(1, 20, 30)]
        responses = [
            make_response("stop-0", "Any issues found?", "yesNo", True),
            make_response("stop-1", "Any issues found?", "yesNo", True),
        ]

        observations = observe(stops, responses)

        assert "High issue rate: 2 of 2 stops (100%) reported problems." in observations

    def test_moderate_issue_count(self):
        stops = [visited(i, i * 20, i * 20 + 10) for i in range(3)]
        responses = [make_response("stop-0", "Any issues found?", "yesNo", True)]

        observations = observe(stops, responses)

        assert "1 stop(s) reported issues that may require follow-up." in observations

    def test_issues_without_completed_stops(self):
        stops = [make_stop(0, "in_progress", arrived_at=at(0))]
        responses = [make_response("stop-0", "Any issues found?", "yesNo", True)]

        observations = observe(stops, responses)

        assert "1 stop(s) reported issues that may require follow-up." in observations

    def test_follow_ups(self):
        observations = observe(
            [visited(0, 0, 10)],
            [make_response("stop-0", "Follow-up needed?", "yesNo", True)],
        )

        assert "1 location(s) require follow-up attention." in observations

    def test_excellent_rating(self):
        observations = observe(
            [visited(0, 0, 10), visited(1, 20, 30)],
            [
                make_response("stop-0", "Customer satisfaction", "rating", 5),
                make_response("stop-1", "Customer satisfaction", "rating", 4),
            ],
        )

        assert "Excellent customer satisfaction with an average rating of 4.5/5." in observations

    def test_good_rating(self):
        observations = observe(
            [visited(0, 0, 10), visited(1, 20, 30), visited(2, 40, 50)],
            [
                make_response("stop-0", "Customer satisfaction", "rating", 4),
                make_response("stop-1", "Customer satisfaction", "rating", 5),
                make_response("stop-2", "Customer satisfaction", "rating", 4),
            ],
        )

        assert "Good customer satisfaction (4.3/5 average rating)." in observations
        assert not any("Excellent" in o for o in observations)

    def test_poor_rating_with_low_count(self):
        observations = observe(
            [visited(0, 0, 10), visited(1, 20, 30)],
            [
                make_response("stop-0", "Customer satisfaction", "rating", 1),
                make_response("stop-1", "Customer satisfaction", "rating", 4),
            ],
        )

        assert "Customer satisfaction needs attention with 2.5/5 average rating." in observations
        assert "1 stop(s) received low satisfaction ratings (2 or below)." in observations

    def test_skipped_names(self):
        stops = [visited(0, 0, 10), make_stop(1, "skipped"), make_stop(2, "skipped", name=None)]

        observations = observe(stops)

        assert "2 stop(s) were skipped: Customer 1, 102 Main St" in observations

    def test_documentation(self):
        responses = [
            make_response("stop-0", "Take a photo", "photo", image_data="data:image/png;base64,AAA"),
            make_response("stop-0", "Customer signature", "signature", image_data="data:image/png;base64,BBB"),
            make_response("stop-1", "Take a photo", "photo"),
        ]

        observations = observe([visited(0, 0, 10)], responses)

        assert "1 photo(s) documented across all visits." in observations
        assert "1 signature(s) collected." in observations


class TestDistanceObservations:
    def test_spread_out(self):
        observations = observe([visited(0, 0, 10)], total_distance=16_093.4)

        assert "High travel distance per stop (10.0 mi) - consider optimizing route clustering." in observations

    def test_clustered(self):
        observations = observe([visited(0, 0, 10), visited(1, 20, 30)], total_distance=1609.34)

        assert "Efficient route with stops clustered closely together." in observations

    def test_no_distance(self):
        observations = observe([visited(0, 0, 10)], total_distance=0)

        assert not any("travel distance" in o or "clustered" in o for o in observations)
