import math
from dataclasses import replace

import pytest

from citysim.network import (
    CurveConnector,
    EntryPoint,
    Lane,
    NetworkConfigError,
    PopulationSlot,
)


def test_ring_road_links_each_source_lane_to_one_curve(ring_road):
    assert ring_road.curve_from("mainWest").id == "westToSouth"
    assert ring_road.curve_from("southUp").id == "southToEast"
    assert ring_road.curve_from("mainEast") is None
    assert ring_road.curve_from("southDown") is None


def test_curve_endpoints_land_on_lanes(ring_road):
    west_to_south = ring_road.curves["westToSouth"]
    assert west_to_south.point_at(west_to_south.start_angle) == pytest.approx((-40, -23))
    assert west_to_south.point_at(west_to_south.end_angle) == pytest.approx((-52, -35))

    south_to_east = ring_road.curves["southToEast"]
    assert south_to_east.sweep == -1
    assert south_to_east.point_at(south_to_east.start_angle) == pytest.approx((-58, -35))
    assert south_to_east.point_at(south_to_east.end_angle) == pytest.approx((-40, -17))


def test_lane_headings_follow_travel_direction(ring_road):
    assert ring_road.lane("mainEast").heading == pytest.approx(math.pi / 2)
    assert ring_road.lane("mainWest").heading == pytest.approx(-math.pi / 2)
    assert ring_road.lane("southUp").heading == pytest.approx(0.0)
    assert abs(ring_road.lane("southDown").heading) == pytest.approx(math.pi)


def test_curve_headings_match_lanes_at_both_ends(ring_road):
    curve = ring_road.curves["westToSouth"]
    assert curve.heading_at(curve.start_angle) == pytest.approx(-math.pi / 2)
    assert abs(curve.heading_at(curve.end_angle)) == pytest.approx(math.pi)


def test_curve_advance_clamps_at_end_angle(ring_road):
    curve = ring_road.curves["southToEast"]
    angle = curve.advance(curve.start_angle, 1.0)
    assert angle == pytest.approx(math.pi - 1.0 / 18)
    assert curve.advance(curve.start_angle, 1000.0) == curve.end_angle


def test_entry_spawn_positions_sit_before_lane_start(ring_road):
    main_west = ring_road.lane("mainWest")
    south_up = ring_road.lane("southUp")
    assert EntryPoint("mainWest", offset=10).spawn_position(main_west) == (290, -23)
    assert EntryPoint("southUp", offset=10).spawn_position(south_up) == (-58, -250)


def test_past_exit_uses_exit_margin(ring_road):
    main_east = ring_road.lane("mainEast")
    assert not main_east.past_exit(300.0, -17)
    assert main_east.past_exit(300.5, -17)

    south_down = ring_road.lane("southDown")
    assert not south_down.past_exit(-52, -259.0)
    assert south_down.past_exit(-52, -260.5)


def test_unknown_lane_lookup_raises_key_error(ring_road):
    with pytest.raises(KeyError):
        ring_road.lane("nowhere")


def test_curve_off_source_lane_is_rejected(ring_road_parts):
    curves = ring_road_parts().curves
    bad = replace(curves["westToSouth"], radius=11)
    with pytest.raises(NetworkConfigError, match="off lane"):
        ring_road_parts(curves=[bad, curves["southToEast"]])


def test_curve_trigger_must_match_start_point(ring_road_parts):
    curves = ring_road_parts().curves
    bad = replace(curves["southToEast"], trigger=-30)
    with pytest.raises(NetworkConfigError, match="trigger"):
        ring_road_parts(curves=[curves["westToSouth"], bad])


def test_curve_end_must_reach_target_lane(ring_road_parts):
    curves = ring_road_parts().curves
    bad = replace(curves["westToSouth"], target_lane="southUp")
    with pytest.raises(NetworkConfigError, match="southUp"):
        ring_road_parts(curves=[bad, curves["southToEast"]])


def test_curve_sweeping_against_lane_direction_is_rejected(ring_road_parts):
    # Same endpoints, but traversed clockwise the long way round
    bad = CurveConnector(
        id="westToSouth",
        source_lane="mainWest",
        target_lane="southDown",
        center=(-40, -35),
        radius=12,
        start_angle=math.pi / 2,
        end_angle=-math.pi,
        trigger=-40,
    )
    curves = ring_road_parts().curves
    with pytest.raises(NetworkConfigError, match="tangent"):
        ring_road_parts(curves=[bad, curves["southToEast"]])


def test_lane_feeding_two_curves_is_rejected(ring_road_parts):
    curves = ring_road_parts().curves
    twin = replace(curves["westToSouth"], id="westToSouthAgain")
    with pytest.raises(NetworkConfigError, match="feeds both"):
        ring_road_parts(curves=[curves["westToSouth"], twin, curves["southToEast"]])


def test_curve_with_unknown_lane_is_rejected(ring_road_parts):
    curves = ring_road_parts().curves
    bad = replace(curves["westToSouth"], source_lane="ghost")
    with pytest.raises(NetworkConfigError, match="Unknown lane 'ghost'"):
        ring_road_parts(curves=[bad])


def test_duplicate_lane_ids_are_rejected(ring_road_parts):
    lanes = list(ring_road_parts().lanes.values())
    with pytest.raises(NetworkConfigError, match="Duplicate lane"):
        ring_road_parts(lanes=lanes + [lanes[0]])


@pytest.mark.parametrize(
    "lane",
    [
        Lane("bad", "y", 0, 0, 10, 1),
        Lane("bad", "x", 0, 0, 10, 2),
        Lane("bad", "x", 0, 10, 10, 1),
        Lane("bad", "x", 0, 0, 10, 1, exit_margin=-1),
    ],
)
def test_malformed_lane_is_rejected(ring_road_parts, lane):
    lanes = list(ring_road_parts().lanes.values())
    with pytest.raises(NetworkConfigError):
        ring_road_parts(lanes=lanes + [lane])


def test_network_needs_entry_points(ring_road_parts):
    with pytest.raises(NetworkConfigError, match="no entry points"):
        ring_road_parts(entry_points=[])


def test_entry_weight_must_be_positive(ring_road_parts):
    with pytest.raises(NetworkConfigError, match="weight"):
        ring_road_parts(entry_points=[EntryPoint("mainWest", weight=0)])


def test_initial_population_must_stop_short_of_trigger(ring_road_parts):
    with pytest.raises(NetworkConfigError, match="trigger"):
        ring_road_parts(initial_population=[PopulationSlot("southUp", 2, (-240, -35))])


def test_initial_population_must_stay_in_bounds(ring_road_parts):
    with pytest.raises(NetworkConfigError, match="bounds"):
        ring_road_parts(initial_population=[PopulationSlot("mainEast", 1, (0, 400))])


def test_crosswalk_contains_is_strict(ring_road):
    crosswalk = ring_road.crosswalks[0]
    assert crosswalk.contains(25, -20)
    assert crosswalk.contains(26.9, -15.1)
    assert not crosswalk.contains(27, -20)
    assert not crosswalk.contains(25, -25)
