from pothole_survey.hotspots import Hotspot, find_hotspots, rank_hotspots


def _records(record_factory, points):
    return [record_factory(x, y) for x, y in points]


def test_tight_cluster_of_three(record_factory):
    records = _records(record_factory, [(100, 100), (105, 103), (98, 109)])
    hotspots = find_hotspots(records)

    assert hotspots == [Hotspot(center=(100.0, 100.0), member_count=3)]


def test_two_records_never_form_a_hotspot(record_factory):
    assert find_hotspots(_records(record_factory, [(0, 0), (1, 1)])) == []
    assert find_hotspots(_records(record_factory, [(0, 0), (500, 400)])) == []


def test_empty_input():
    assert find_hotspots([]) == []


def test_scattered_records(record_factory):
    records = _records(record_factory, [(0, 0), (200, 0), (400, 0), (600, 0)])
    assert find_hotspots(records) == []


def test_distance_is_strict(record_factory):
    # Neighbours at exactly 50px do not count
    records = _records(record_factory, [(0, 0), (50, 0), (0, 50)])
    assert find_hotspots(records) == []


def test_separate_clusters(record_factory):
    records = _records(record_factory, [
        (10, 10), (20, 10), (15, 20), (12, 12),
        (500, 300), (510, 305), (505, 290),
    ])
    hotspots = find_hotspots(records)

    assert [h.member_count for h in hotspots] == [4, 3]
    assert hotspots[0].center == (10.0, 10.0)
    assert hotspots[1].center == (500.0, 300.0)


def test_first_seed_wins(record_factory):
    chain = [(0, 0), (30, 0), (60, 0), (90, 0)]

    forward = find_hotspots(_records(record_factory, chain))
    assert forward == [Hotspot(center=(30.0, 0.0), member_count=3)]

    backward = find_hotspots(_records(record_factory, chain[::-1]))
    assert backward == [Hotspot(center=(60.0, 0.0), member_count=3)]


def test_duplicate_positions_count_as_neighbours(record_factory):
    records = _records(record_factory, [(40, 40)] * 4)
    assert find_hotspots(records) == [Hotspot(center=(40.0, 40.0), member_count=4)]


def test_custom_radius(record_factory):
    records = _records(record_factory, [(0, 0), (80, 0), (0, 80)])
    assert find_hotspots(records) == []
    assert find_hotspots(records, radius=100) == [Hotspot(center=(0.0, 0.0), member_count=3)]


def test_member_count_floor(record_factory):
    records = _records(record_factory, [
        (0, 0), (10, 0), (20, 0), (30, 0), (300, 300), (305, 300),
    ])
    assert all(h.member_count >= 3 for h in find_hotspots(records))


def test_rank_hotspots_descending_and_stable():
    hotspots = [
        Hotspot((0, 0), 3),
        Hotspot((100, 0), 5),
        Hotspot((200, 0), 3),
        Hotspot((300, 0), 4),
    ]
    ranked = rank_hotspots(hotspots)

    assert [h.member_count for h in ranked] == [5, 4, 3, 3]
    assert [h.center for h in ranked[2:]] == [(0, 0), (200, 0)]
