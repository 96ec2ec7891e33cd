import itertools
import threading

import numpy as np
import pytest

from pothole_survey.aggregator import Aggregator
from pothole_survey.classifier import RiskLevel, SizeCategory
from pothole_survey.frame_analyzer import FrameAnalyzer


@pytest.fixture
def frame_results(square, frame_size):
    analyzer = FrameAnalyzer()
    frames = [
        [square(10, 10, 30), square(400, 175, 150)],
        [square(460, 200, 100)],
        [],
        [square(900, 400, 50), square(905, 405, 40), square(100, 240, 20)],
    ]
    return [analyzer.analyze_frame(frame_size, contours, frame_index=i)
            for i, contours in enumerate(frames)]


def _aggregate(results):
    aggregator = Aggregator()
    session = aggregator.begin()
    for result in results:
        aggregator.ingest(session, result)
    return aggregator.finalize(session)


def test_totals(frame_results):
    stats = _aggregate(frame_results)

    assert stats.frames_ingested == 4
    assert stats.total_potholes == 6
    assert sum(stats.size_counts.values()) == len(stats.records) == len(stats.areas)
    assert sum(stats.risk_counts.values()) == len(stats.records)
    assert stats.size_counts[SizeCategory.LARGE] == 1
    assert stats.heatmap.dtype == np.int32
    assert stats.heatmap.shape == (500, 1020)


def test_records_keep_ingestion_order(frame_results):
    stats = _aggregate(frame_results)
    assert [r.frame_index for r in stats.records] == [0, 0, 1, 3, 3, 3]


def test_fold_is_order_independent(frame_results):
    reference = _aggregate(frame_results)

    for permutation in itertools.permutations(frame_results):
        stats = _aggregate(permutation)
        assert stats.size_counts == reference.size_counts
        assert stats.risk_counts == reference.risk_counts
        assert sorted(stats.areas) == sorted(reference.areas)
        assert np.array_equal(stats.heatmap, reference.heatmap)


def test_heatmap_counts_overlapping_frames(square, frame_size):
    analyzer = FrameAnalyzer(heatmap_fill=True)
    result = analyzer.analyze_frame(frame_size, [square(100, 100, 40)])

    stats = _aggregate([result, result, result])
    assert stats.heatmap[120, 120] == 3
    assert stats.heatmap[0, 0] == 0


def test_empty_session():
    aggregator = Aggregator()
    stats = aggregator.finalize(aggregator.begin())

    assert stats.total_potholes == 0
    assert stats.average_area == 0.0
    assert stats.heatmap is None
    assert stats.size_counts == {s: 0 for s in SizeCategory}
    assert stats.risk_counts == {r: 0 for r in RiskLevel}


def test_begin_with_frame_shape():
    aggregator = Aggregator()
    stats = aggregator.finalize(aggregator.begin(frame_shape=(50, 80)))

    assert stats.heatmap.shape == (50, 80)
    assert not stats.heatmap.any()


def test_shape_mismatch_rejected(square):
    analyzer = FrameAnalyzer()
    aggregator = Aggregator()
    session = aggregator.begin()

    aggregator.ingest(session, analyzer.analyze_frame((100, 100), [square(10, 10, 20)]))
    with pytest.raises(ValueError):
        aggregator.ingest(session, analyzer.analyze_frame((200, 100), [square(10, 10, 20)]))


def test_partial_finalize(frame_results):
    aggregator = Aggregator()
    session = aggregator.begin()
    aggregator.ingest(session, frame_results[0])

    partial = aggregator.finalize(session)
    assert partial.total_potholes == 2
    assert partial.frames_ingested == 1

    # Session keeps accumulating; the earlier snapshot does not change
    aggregator.ingest(session, frame_results[1])
    assert partial.total_potholes == 2
    assert aggregator.finalize(session).total_potholes == 3


def test_snapshot_heatmap_is_a_copy(frame_results):
    aggregator = Aggregator()
    session = aggregator.begin()
    aggregator.ingest(session, frame_results[0])

    stats = aggregator.finalize(session)
    stats.heatmap[:] = 99
    assert aggregator.finalize(session).heatmap.max() <= 1


def test_average_area(square):
    analyzer = FrameAnalyzer()
    result = analyzer.analyze_frame((500, 500), [square(0, 0, 10), square(100, 100, 30)])
    assert _aggregate([result]).average_area == pytest.approx(500.0)


def test_concurrent_ingest(frame_results):
    aggregator = Aggregator()
    session = aggregator.begin()

    def worker():
        for result in frame_results:
            aggregator.ingest(session, result)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    stats = aggregator.finalize(session)
    single = _aggregate(frame_results)

    assert stats.frames_ingested == 8 * len(frame_results)
    assert stats.total_potholes == 8 * single.total_potholes
    assert np.array_equal(stats.heatmap, 8 * single.heatmap)


def test_statistics_to_dict(frame_results):
    data = _aggregate(frame_results).to_dict()
    assert set(data['size_counts']) == {'Small', 'Medium', 'Large'}
    assert data['total_potholes'] == 6
