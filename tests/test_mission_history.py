import threading

import pytest

from core.mission_history import SEED_LOCATION, InMemoryMissionHistory, MissionHistory, seed_missions
from core.telemetry import Mission, MissionStatus


def _record(mission_id):
    return Mission(mission_id, mission_id, "Oct 1, 2025", "1 mins", MissionStatus.COMPLETED, "Test")


def test_seed_missions_most_recent_first():
    missions = seed_missions()
    assert [m.id for m in missions] == ["m12", "m11", "m10", "m09", "m08", "m07", "m06"]
    assert all(m.location == SEED_LOCATION for m in missions)
    assert missions[1].status is MissionStatus.INTERRUPTED
    assert missions[1].gps_track is None
    assert len(missions[2].detected_sites) == 2


def test_prepend_puts_newest_first():
    history = InMemoryMissionHistory([_record("m1"), _record("m2")])
    history.prepend(_record("m3"))
    assert history.ids() == ["m3", "m1", "m2"]
    assert len(history) == 3


def test_prepend_rejects_duplicate_id():
    history = InMemoryMissionHistory([_record("m1")])
    with pytest.raises(ValueError):
        history.prepend(_record("m1"))
    assert len(history) == 1


def test_list_is_a_snapshot():
    history = InMemoryMissionHistory()
    before = history.list()
    history.prepend(_record("m1"))
    assert before == ()
    assert isinstance(history.list(), tuple)


def test_concurrent_prepends_are_all_kept():
    history = InMemoryMissionHistory()

    def writer(prefix):
        for i in range(50):
            history.prepend(_record(f"{prefix}-{i}"))

    threads = [threading.Thread(target=writer, args=(p,)) for p in "abcd"]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(history) == 200
    assert len(set(history.ids())) == 200


def test_history_interface_is_abstract():
    with pytest.raises(TypeError):
        MissionHistory()


def test_minimal_history_gets_len_and_ids():

    class ListHistory(MissionHistory):
        def __init__(self):
            self.items = []

        def prepend(self, mission):
            self.items.insert(0, mission)

        def list(self):
            return tuple(self.items)

    history = ListHistory()
    history.prepend(_record("m1"))
    history.prepend(_record("m2"))
    assert len(history) == 2
    assert history.ids() == ["m2", "m1"]
