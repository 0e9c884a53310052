import unittest

from shapely.geometry import LineString, Point, Polygon

from Service.config import AdminizerConfig
from Service.post_process.admin import AdminProcessor, SpatialIndex, collect_entries
from Service.post_process.feature import Envelope, Feature


class RecordingLogger:
    def __init__(self):
        self.records = []

    def log(self, msg, level="DEBUG"):
        self.records.append((level, msg))


class ListDatasource:
    """참조 피처 목록을 그대로 돌려주는 테스트용 데이터소스."""

    def __init__(self, features, fail=False):
        self._features = features
        self._fail = fail
        self.queries = []

    def features(self, envelope):
        self.queries.append(envelope)
        if self._fail:
            raise RuntimeError("datasource unavailable")
        return iter(self._features)


def square(x0, y0, size):
    return Polygon([(x0, y0), (x0 + size, y0), (x0 + size, y0 + size), (x0, y0 + size)])


def region(fid, geom, value):
    return Feature(id=fid, geometries=[geom], attributes={"admin": value})


CONFIG = AdminizerConfig(param_name="admin")


class SpatialIndexTests(unittest.TestCase):
    def test_entries_take_priority_from_enumeration_and_skip_non_polygons(self):
        source = ListDatasource([
            region(10, square(0, 0, 1), "a"),
            region(11, LineString([(0, 0), (1, 1)]), "line"),
            Feature(id=12, geometries=[square(5, 5, 1), Point(0, 0), square(7, 7, 1)], attributes={"admin": "b"}),
        ])
        entries = collect_entries(source, Envelope(0, 0, 10, 10), "admin")
        self.assertEqual([e.index for e in entries], [0, 1, 2])
        self.assertEqual([e.value for e in entries], ["a", "b", "b"])

    def test_query_returns_box_hits_in_ascending_order(self):
        source = ListDatasource([
            region(1, square(0, 0, 2), "a"),
            region(2, square(10, 10, 2), "b"),
            region(3, square(1, 1, 2), "c"),
        ])
        index = SpatialIndex(collect_entries(source, Envelope(0, 0, 20, 20), "admin"))
        self.assertEqual(index.query((1.5, 1.5, 1.6, 1.6)), [0, 2])
        self.assertEqual(index.query((50, 50, 51, 51)), [])

    def test_empty_index_answers_nothing(self):
        index = SpatialIndex([])
        self.assertEqual(len(index), 0)
        self.assertEqual(index.query((0, 0, 1, 1)), [])


class AdminProcessorTests(unittest.TestCase):
    def _processor(self, features, fail=False):
        source = ListDatasource(features, fail=fail)
        return AdminProcessor(RecordingLogger(), CONFIG, source), source

    def test_lowest_priority_index_wins(self):
        # 우선순위 0, 2, 5 가 점을 포함하고 1, 3, 4 는 떨어져 있음
        references = [
            region(100, square(0, 0, 4), "p0"),
            region(101, square(50, 50, 1), "p1"),
            region(102, square(1, 1, 4), "p2"),
            region(103, square(60, 60, 1), "p3"),
            region(104, square(70, 70, 1), "p4"),
            region(105, square(-1, -1, 8), "p5"),
        ]
        processor, _ = self._processor(references)
        feature = Feature(id=1, geometries=[Point(2, 2)], attributes={"admin": "old"})
        processor.process([feature])
        self.assertEqual(feature.get("admin"), "p0")

    def test_no_match_keeps_previous_value(self):
        processor, _ = self._processor([region(100, square(10, 10, 1), "far")])
        feature = Feature(id=1, geometries=[Point(0, 0)], attributes={"admin": "keep"})
        untouched = Feature(id=2, geometries=[Point(0, 0)], attributes={})
        processor.process([feature, untouched])
        self.assertEqual(feature.get("admin"), "keep")
        self.assertFalse(untouched.has_key("admin"))

    def test_bounding_box_overlap_alone_is_not_a_match(self):
        l_shape = Polygon([(0, 0), (4, 0), (4, 1), (1, 1), (1, 4), (0, 4)])
        processor, _ = self._processor([region(100, l_shape, "L")])
        feature = Feature(id=1, geometries=[Point(3, 3)], attributes={"admin": None})
        processor.process([feature])
        self.assertIsNone(feature.get("admin"))

    def test_later_geometry_can_improve_priority(self):
        references = [
            region(100, square(10, 10, 1), "zero"),
            region(101, square(0, 0, 1), "one"),
        ]
        processor, _ = self._processor(references)
        feature = Feature(
            id=1,
            geometries=[Point(0.5, 0.5), LineString([(9, 10.5), (12, 10.5)])],
            attributes={},
        )
        processor.process([feature])
        self.assertEqual(feature.get("admin"), "zero")

    def test_line_and_polygon_features_are_tested_exactly(self):
        references = [region(100, square(0, 0, 2), "inside")]
        processor, _ = self._processor(references)
        crossing = Feature(id=1, geometries=[LineString([(-1, 1), (3, 1)])])
        polygon = Feature(id=2, geometries=[square(1.5, 1.5, 3)])
        outside = Feature(id=3, geometries=[LineString([(3, 3), (4, 4)])])
        processor.process([crossing, polygon, outside])
        self.assertEqual(crossing.get("admin"), "inside")
        self.assertEqual(polygon.get("admin"), "inside")
        self.assertFalse(outside.has_key("admin"))

    def test_reference_query_uses_combined_layer_envelope(self):
        processor, source = self._processor([])
        layer = [
            Feature(id=1, geometries=[Point(0, 0)]),
            Feature(id=2),
            Feature(id=3, geometries=[Point(5, 7)]),
        ]
        processor.process(layer)
        self.assertEqual(source.queries, [Envelope(0, 0, 5, 7)])

    def test_empty_layer_does_not_query(self):
        processor, source = self._processor([])
        self.assertEqual(processor.process([]), [])
        self.assertEqual(source.queries, [])

    def test_rerun_is_idempotent(self):
        references = [region(100, square(0, 0, 2), "a"), region(101, square(1, 1, 2), "b")]
        processor, _ = self._processor(references)
        layer = [
            Feature(id=1, geometries=[Point(1.5, 1.5)]),
            Feature(id=2, geometries=[Point(2.5, 2.5)]),
        ]
        processor.process(layer)
        first = [f.get("admin") for f in layer]
        processor.process(layer)
        self.assertEqual([f.get("admin") for f in layer], first)
        self.assertEqual(first, ["a", "b"])

    def test_datasource_failure_is_fatal_and_leaves_layer_untouched(self):
        processor, _ = self._processor([region(100, square(0, 0, 2), "a")], fail=True)
        feature = Feature(id=1, geometries=[Point(1, 1)], attributes={"admin": "before"})
        with self.assertRaises(RuntimeError):
            processor.process([feature])
        self.assertEqual(feature.get("admin"), "before")
        self.assertTrue(any(level == "ERROR" for level, _ in processor._logger.records))


if __name__ == "__main__":
    unittest.main()
