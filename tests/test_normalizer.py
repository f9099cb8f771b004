"""
Tests for raw record normalization.
"""
from datetime import date, datetime, timezone

import pytest

from neo_watch.classifier import RiskLevel
from neo_watch.errors import MalformedRecord
from neo_watch.normalizer import normalize, normalize_many, upcoming_approaches

from conftest import make_record


class TestNormalize:

    def test_string_numbers_are_parsed(self):
        asteroid = normalize(make_record(au=0.0123, lunar=4.78, km=1840000.5, km_s=17.25))

        assert asteroid.id == "3542519"
        assert asteroid.name == "(2010 PK9)"
        assert asteroid.distance_au == pytest.approx(0.0123)
        assert asteroid.distance_lunar == pytest.approx(4.78)
        assert asteroid.distance_km == pytest.approx(1840000.5)
        assert asteroid.velocity_km_per_sec == pytest.approx(17.25)
        assert asteroid.velocity_km_per_hour == pytest.approx(17.25 * 3600)

    def test_distances_are_not_cross_converted(self):
        # Deliberately inconsistent units must survive untouched
        asteroid = normalize(make_record(au=0.1, lunar=1.0, km=2.0))

        assert asteroid.distance_au == pytest.approx(0.1)
        assert asteroid.distance_lunar == pytest.approx(1.0)
        assert asteroid.distance_km == pytest.approx(2.0)

    def test_missing_diameter_defaults_to_zero(self):
        record = make_record(diameter_min_m=None)
        assert "estimated_diameter" not in record

        asteroid = normalize(record)

        assert asteroid.diameter_min_m == 0
        assert asteroid.diameter_max_m == 0

    def test_diameter_pair_is_ordered(self):
        asteroid = normalize(make_record(diameter_min_m=300.0, diameter_max_m=120.0))

        assert asteroid.diameter_min_m == 120.0
        assert asteroid.diameter_max_m == 300.0

    def test_first_close_approach_is_selected(self):
        record = make_record(au=0.3, approach_date="2024-01-05")
        later = make_record(au=0.001, approach_date="2031-06-01")["close_approach_data"][0]
        record["close_approach_data"].append(later)

        asteroid = normalize(record)

        assert asteroid.distance_au == pytest.approx(0.3)
        assert asteroid.approach_date == date(2024, 1, 5)

    def test_epoch_timestamp(self):
        asteroid = normalize(make_record(approach_date="2024-01-05", hour=7))

        assert asteroid.approach_timestamp == datetime(2024, 1, 5, 7, 0, tzinfo=timezone.utc)

    def test_full_date_fallback(self):
        record = make_record()
        approach = record["close_approach_data"][0]
        del approach["epoch_date_close_approach"]
        approach["close_approach_date_full"] = "2024-Feb-29 23:15"

        asteroid = normalize(record)

        assert asteroid.approach_timestamp == datetime(2024, 2, 29, 23, 15, tzinfo=timezone.utc)

    def test_plain_date_fallback(self):
        record = make_record(approach_date="2024-03-10")
        approach = record["close_approach_data"][0]
        del approach["epoch_date_close_approach"]
        del approach["close_approach_date_full"]

        asteroid = normalize(record)

        assert asteroid.approach_timestamp == datetime(2024, 3, 10, tzinfo=timezone.utc)

    @pytest.mark.parametrize("epoch", [10**20, -10**20])
    def test_out_of_range_epoch_falls_back_to_full_date(self, epoch):
        record = make_record(approach_date="2024-01-05", hour=7)
        record["close_approach_data"][0]["epoch_date_close_approach"] = epoch

        asteroid = normalize(record)

        assert asteroid.approach_timestamp == datetime(2024, 1, 5, 7, 0, tzinfo=timezone.utc)

    def test_integer_id_becomes_text(self):
        record = make_record()
        record["id"] = 3542519

        assert normalize(record).id == "3542519"

    def test_risk_level_is_computed(self):
        asteroid = normalize(make_record(hazardous=True, diameter_min_m=1200, diameter_max_m=1500, au=0.01))

        assert asteroid.risk_level == RiskLevel.HIGH
        assert asteroid.model_dump()["risk_level"] == RiskLevel.HIGH

    def test_optional_extras(self):
        asteroid = normalize(make_record())

        assert asteroid.absolute_magnitude == pytest.approx(21.3)
        assert asteroid.orbiting_body == "Earth"
        assert asteroid.nasa_jpl_url.endswith("3542519")


class TestMalformed:

    def test_missing_id(self):
        record = make_record()
        del record["id"]

        with pytest.raises(MalformedRecord):
            normalize(record)

    def test_no_close_approach(self):
        record = make_record()
        record["close_approach_data"] = []

        with pytest.raises(MalformedRecord) as exc:
            normalize(record)

        assert exc.value.record_id == "3542519"

    @pytest.mark.parametrize("field", ["astronomical", "lunar", "kilometers"])
    def test_missing_distance_unit(self, field):
        record = make_record()
        del record["close_approach_data"][0]["miss_distance"][field]

        with pytest.raises(MalformedRecord):
            normalize(record)

    def test_missing_velocity(self):
        record = make_record()
        del record["close_approach_data"][0]["relative_velocity"]

        with pytest.raises(MalformedRecord):
            normalize(record)

    def test_unparseable_number(self):
        record = make_record()
        record["close_approach_data"][0]["miss_distance"]["astronomical"] = "not-a-number"

        with pytest.raises(MalformedRecord) as exc:
            normalize(record)

        assert exc.value.record_id == "3542519"


class TestBatch:

    def test_bad_records_are_dropped(self):
        bad = make_record("2000001")
        bad["close_approach_data"] = []

        asteroids = normalize_many([make_record("1000001"), bad, make_record("1000002")])

        assert [a.id for a in asteroids] == ["1000001", "1000002"]

    def test_out_of_range_epoch_does_not_fail_the_batch(self):
        odd = make_record("2000001", approach_date="2024-01-03")
        approach = odd["close_approach_data"][0]
        approach["epoch_date_close_approach"] = 10**20
        del approach["close_approach_date_full"]

        asteroids = normalize_many([make_record("1000001"), odd])

        assert [a.id for a in asteroids] == ["1000001", "2000001"]
        assert asteroids[1].approach_timestamp == datetime(2024, 1, 3, tzinfo=timezone.utc)

    def test_upcoming_approaches_limit(self):
        record = make_record()
        approach = record["close_approach_data"][0]
        record["close_approach_data"] = [dict(approach) for _ in range(8)]

        events = upcoming_approaches(record, limit=5)

        assert len(events) == 5
        assert events[0].date == "2024-01-01"
        assert events[0].orbiting_body == "Earth"
