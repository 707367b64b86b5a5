import pytest

from citysim.traffic import CrosswalkYieldOracle, never_yield


@pytest.fixture
def oracle(ring_road):
    return CrosswalkYieldOracle(ring_road.crosswalks, ring_road.lanes)


def test_never_yield_is_always_false():
    assert not never_yield((0.0, 0.0), "mainWest")


def test_update_marks_crosswalks_with_pedestrians(oracle):
    oracle.update([(25.5, -18.0), (100.0, 100.0)])
    assert oracle.occupied == {"main1": True, "main2": False, "south1": False}

    oracle.update([])
    assert not any(oracle.occupied.values())


def test_occupied_view_is_read_only(oracle):
    with pytest.raises(TypeError):
        oracle.occupied["main1"] = True


def test_vehicle_yields_only_inside_forward_window(oracle):
    oracle.set_occupied("main1")

    # mainWest travels towards -x, the crosswalk sits at x=25
    assert oracle((35.0, -23.0), "mainWest")
    assert not oracle((45.0, -23.0), "mainWest")
    assert not oracle((26.0, -23.0), "mainWest")
    assert not oracle((20.0, -23.0), "mainWest")

    # mainEast travels towards +x
    assert oracle((15.0, -17.0), "mainEast")
    assert not oracle((35.0, -17.0), "mainEast")


def test_free_crosswalk_never_stops_traffic(oracle):
    assert not oracle((35.0, -23.0), "mainWest")


def test_crosswalk_only_affects_its_own_lanes(oracle):
    oracle.set_occupied("main1")
    oracle.set_occupied("south1")

    assert oracle.should_yield((-58.0, -100.0), "southUp")
    assert not oracle((-58.0, -100.0), "mainWest")
    assert not oracle((35.0, -23.0), "unknown")


def test_set_occupied_rejects_unknown_crosswalk(oracle):
    with pytest.raises(KeyError):
        oracle.set_occupied("nowhere")


def test_invalid_window_raises(ring_road):
    with pytest.raises(ValueError):
        CrosswalkYieldOracle(ring_road.crosswalks, ring_road.lanes, near=15, far=2)


def test_vehicle_on_crosswalk_uses_approach_margins(oracle, make_simulator):
    sim = make_simulator()
    near = sim.place_vehicle("mainWest", 30)
    assert oracle.vehicle_on_crosswalk("main1", [near])

    far = sim.place_vehicle("mainWest", 40)
    assert not oracle.vehicle_on_crosswalk("main1", [far])
    assert not oracle.vehicle_on_crosswalk("nowhere", [near])


def test_vehicle_approach_reach_uses_crosswalk_length(oracle, make_simulator):
    sim = make_simulator()

    # main1 is 10 long across the road, so traffic counts within 5 + 8 along x
    approaching = sim.place_vehicle("mainWest", 37.9)
    assert oracle.vehicle_on_crosswalk("main1", [approaching])
    clear = sim.place_vehicle("mainWest", 38.1)
    assert not oracle.vehicle_on_crosswalk("main1", [clear])

    # south1 runs across the south road, so the reach is along z
    south = sim.place_vehicle("southUp", -102.5)
    assert oracle.vehicle_on_crosswalk("south1", [south])
    assert not oracle.vehicle_on_crosswalk("south1", [sim.place_vehicle("southUp", -103.5)])
