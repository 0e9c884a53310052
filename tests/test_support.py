import ast
import datetime
import tempfile
import unittest
from pathlib import Path

import geopandas as gpd
from shapely.geometry import LineString

from Common.log import Log
from Function.log_cleanup import clean_old_logs
from tools.eval_union import build_graph, evaluate


class RecordingLogger:
    def __init__(self):
        self.records = []

    def log(self, msg, level="DEBUG"):
        self.records.append((level, msg))


class LogCleanupTests(unittest.TestCase):
    def test_only_expired_log_files_are_removed(self):
        logger = RecordingLogger()
        now = datetime.datetime(2026, 10, 19, 12, 0, 0)
        with tempfile.TemporaryDirectory() as tmp:
            log_dir = Path(tmp)
            for name in ("Log_20261010.log", "Log_20261018.log", "Log_broken.log", "other.txt"):
                (log_dir / name).write_text("x", encoding="utf-8")

            removed = clean_old_logs(log_dir, logger, retention_days=3, now=now)
            remaining = sorted(p.name for p in log_dir.iterdir())

        self.assertEqual(removed, 1)
        self.assertEqual(remaining, ["Log_20261018.log", "Log_broken.log", "other.txt"])
        self.assertTrue(any(level == "WARNING" and "Log_broken.log" in msg for level, msg in logger.records))

    def test_missing_directory_is_skipped(self):
        logger = RecordingLogger()
        self.assertEqual(clean_old_logs("/nonexistent/log/dir", logger), 0)
        self.assertEqual(logger.records[0][0], "WARNING")


class LogTests(unittest.TestCase):
    def test_messages_go_to_the_dated_log_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            logger = Log(log_dir=tmp, name="postproc-test", console=False)
            logger.log("[Test] 기록 확인", level="INFO")
            logger.log("[Test] 디버그 기록", level="DEBUG")

            log_path = Path(logger.get_log_paths())
            self.assertEqual(log_path.parent, Path(tmp))
            self.assertRegex(log_path.name, r"^Log_\d{8}\.log$")
            content = log_path.read_text(encoding="utf-8")

            for handler in list(logger._logger.handlers):
                handler.close()

        self.assertIn("INFO - [Test] 기록 확인", content)
        self.assertIn("DEBUG - [Test] 디버그 기록", content)


class EvalUnionTests(unittest.TestCase):
    def test_merged_chain_passes_gates(self):
        before = gpd.GeoDataFrame({"geometry": [
            LineString([(0, 0), (1, 0)]),
            LineString([(1, 0), (2, 0)]),
            LineString([(2, 0), (3, 0)]),
        ]})
        after = gpd.GeoDataFrame({"geometry": [LineString([(0, 0), (1, 0), (2, 0), (3, 0)])]})

        result = evaluate(before, after, {"min_line_reduction_ratio": 0.5, "max_pass_through_count": 0})

        self.assertTrue(result["passed"])
        self.assertEqual(result["metrics"]["output_lines"], 1)
        self.assertAlmostEqual(result["metrics"]["line_reduction_ratio"], 2 / 3)
        self.assertEqual(result["metrics"]["component_count"], 1)

    def test_unmerged_pass_through_fails_gate(self):
        lines = gpd.GeoDataFrame({"geometry": [LineString([(0, 0), (1, 0)]), LineString([(1, 0), (2, 0)])]})
        result = evaluate(lines, lines, {"max_pass_through_count": 0})

        self.assertFalse(result["passed"])
        self.assertFalse(result["checks"]["max_pass_through_count"])
        self.assertEqual(result["metrics"]["pass_through_count"], 1)

    def test_graph_uses_line_endpoints(self):
        graph = build_graph([LineString([(0, 0), (0.5, 0.5), (1, 0)])])
        self.assertEqual(sorted(graph.nodes), [(0.0, 0.0), (1.0, 0.0)])

    def test_gate_keys_are_defined(self):
        src = Path("tools/eval_union.py").read_text(encoding="utf-8")
        module = ast.parse(src)
        functions = {node.name for node in module.body if isinstance(node, ast.FunctionDef)}
        self.assertTrue({"evaluate", "build_graph", "main"}.issubset(functions))
        for key in ('"min_line_reduction_ratio"', '"max_pass_through_count"', '"max_length_change_rate"'):
            self.assertIn(key, src)


if __name__ == "__main__":
    unittest.main()
