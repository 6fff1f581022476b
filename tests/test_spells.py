"""Tests for the spell lifecycle."""
import pytest

from spellwatch.core.spells import lock_id
from spellwatch.utils.constants import POINTS_COLLECTION, SPELL_LOCKS_COLLECTION, SPELLS_COLLECTION
from spellwatch.utils.errors import AlreadyActiveError, NoActiveSpellError, RainfallStillActiveError


def active_spells(store, city):
    return store.query(SPELLS_COLLECTION, where={"cityName": city, "status": "active"})


class TestStartSpell:
    def test_start_creates_active_spell(self, services, clock):
        spell = services.spells.start_spell("Lahore")

        assert spell.status == "active"
        assert spell.city_name == "Lahore"
        assert spell.start_time == clock.now
        assert spell.end_time is None
        assert spell.spell_data == []
        assert services.spells.get_active_spell("Lahore").spell_id == spell.spell_id

    def test_second_start_fails_and_keeps_one_active(self, services, store):
        services.spells.start_spell("Lahore")
        with pytest.raises(AlreadyActiveError):
            services.spells.start_spell("Lahore")
        assert len(active_spells(store, "Lahore")) == 1

    def test_cities_are_independent(self, services, store):
        services.spells.start_spell("Lahore")
        services.spells.start_spell("Multan")
        assert len(active_spells(store, "Lahore")) == 1
        assert len(active_spells(store, "Multan")) == 1

    @pytest.mark.parametrize(
        "first, other",
        [("Lahore", "lahore"), ("Dera Ghazi/Khan", "Dera Ghazi-Khan"), ("Dera Ghazi Khan", "Dera Ghazi Khan ")],
    )
    def test_lock_is_keyed_on_exact_city_name(self, services, store, first, other):
        services.spells.start_spell(first)
        services.spells.start_spell(other)

        assert len(active_spells(store, first)) == 1
        assert len(active_spells(store, other)) == 1
        assert lock_id(first) != lock_id(other)
        assert "/" not in lock_id("Dera Ghazi/Khan")

    def test_lock_blocks_start_that_missed_the_active_spell(self, services, store, monkeypatch):
        services.spells.start_spell("Lahore")
        # Simulate a concurrent request whose read happened before the first write
        monkeypatch.setattr(services.spells, "get_active_spell", lambda city: None)

        with pytest.raises(AlreadyActiveError):
            services.spells.start_spell("Lahore")
        assert len(active_spells(store, "Lahore")) == 1

    def test_stale_lock_is_released(self, services, store):
        store.set(SPELL_LOCKS_COLLECTION, lock_id("Lahore"), {"cityName": "Lahore", "spellId": "gone"})
        spell = services.spells.start_spell("Lahore")
        assert store.get(SPELL_LOCKS_COLLECTION, lock_id("Lahore")).data["spellId"] == spell.spell_id


class TestStopSpell:
    def test_stop_without_active_spell(self, services):
        with pytest.raises(NoActiveSpellError):
            services.spells.stop_spell("Lahore")

    def test_stop_rejected_while_raining(self, services, store, lahore_points):
        spell = services.spells.start_spell("Lahore")
        points_before = {d.doc_id: d.data for d in store.query(POINTS_COLLECTION)}

        with pytest.raises(RainfallStillActiveError) as exc:
            services.spells.stop_spell("Lahore")

        assert exc.value.point_names == ["A", "B"]
        assert services.spells.get_spell(spell.spell_id).status == "active"
        assert {d.doc_id: d.data for d in store.query(POINTS_COLLECTION)} == points_before

    def test_lahore_example(self, services, lahore_points, find_point, clock):
        a, b = lahore_points
        services.spells.start_spell("Lahore")
        with pytest.raises(RainfallStillActiveError):
            services.spells.stop_spell("Lahore")

        services.points.add_or_update("Lahore", {"id": a.point_id, "name": "A", "currentSpell": 0, "ponding": 2})
        services.points.add_or_update("Lahore", {"id": b.point_id, "name": "B", "currentSpell": 0, "ponding": 0})
        clock.advance(hours=2)
        spell = services.spells.stop_spell("Lahore")

        assert spell.status == "completed"
        assert spell.end_time == clock.now
        entries = {e.point_name: e for e in spell.spell_data}
        assert len(spell.spell_data) == 2
        assert entries["A"].total_rainfall == 5
        assert entries["B"].total_rainfall == 3
        assert entries["A"].ponding_level == 2
        assert entries["A"].point_id == a.point_id

        for name in ("A", "B"):
            point = find_point("Lahore", name)
            assert point.current_spell == 0
            assert point.max_spell_rainfall == 0
            assert point.is_raining is False
        assert services.spells.get_active_spell("Lahore") is None

    def test_stop_keeps_ponding_and_clearance(self, services, find_point):
        services.points.add_or_update("Lahore", {"name": "P", "currentSpell": 0, "ponding": 3, "clearedInTime": ""})
        services.points.add_or_update("Lahore", {"name": "Q", "currentSpell": 0, "ponding": 0, "clearedInTime": "00:45"})
        services.spells.start_spell("Lahore")

        spell = services.spells.stop_spell("Lahore")

        entries = {e.point_name: e for e in spell.spell_data}
        assert entries["P"].ponding_level == 3
        assert entries["Q"].cleared_in_time == "00:45"
        assert find_point("Lahore", "P").ponding == 3

    def test_stop_with_no_points(self, services):
        services.spells.start_spell("Okara")
        spell = services.spells.stop_spell("Okara")
        assert spell.spell_data == []

    def test_restart_after_stop(self, services, store):
        services.spells.start_spell("Lahore")
        services.spells.stop_spell("Lahore")
        assert store.get(SPELL_LOCKS_COLLECTION, lock_id("Lahore")) is None

        services.spells.start_spell("Lahore")
        assert len(active_spells(store, "Lahore")) == 1


class TestLatestReport:
    def test_no_report(self, services):
        assert services.spells.get_latest_report("Lahore") is None

    def test_active_spell_is_not_a_report(self, services):
        services.spells.start_spell("Lahore")
        assert services.spells.get_latest_report("Lahore") is None

    def test_latest_completed_spell(self, services, clock):
        services.spells.start_spell("Lahore")
        first = services.spells.stop_spell("Lahore")
        clock.advance(hours=5)
        services.spells.start_spell("Lahore")
        clock.advance(hours=1)
        second = services.spells.stop_spell("Lahore")
        services.spells.start_spell("Multan")
        clock.advance(hours=1)
        services.spells.stop_spell("Multan")

        latest = services.spells.get_latest_report("Lahore")
        assert latest.spell_id == second.spell_id
        assert latest.spell_id != first.spell_id
