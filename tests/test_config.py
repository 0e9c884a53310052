import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from pydantic import ValidationError

from Service.config import (
    AdminizerConfig,
    AppConfig,
    PipelineConfig,
    TagStrategy,
    UnionHeuristic,
    UnionizerConfig,
    load_pipeline_config,
)


class UnionizerConfigTests(unittest.TestCase):
    def test_defaults(self):
        config = UnionizerConfig()
        self.assertEqual(config.union_heuristic, UnionHeuristic.GREEDY)
        self.assertEqual(config.tag_strategy, TagStrategy.INTERSECT)
        self.assertIsNone(config.max_iterations)
        self.assertEqual(config.match_tags, ())
        self.assertAlmostEqual(config.angle_union_sample_ratio, 0.1)

    def test_tag_lists_are_normalised_to_sorted_sets(self):
        config = UnionizerConfig(match_tags=["name", "kind", "name"], preserve_direction_tags="oneway")
        self.assertEqual(config.match_tags, ("kind", "name"))
        self.assertEqual(config.preserve_direction_tags, ("oneway",))

    def test_invalid_values_are_rejected(self):
        with self.assertRaises(ValidationError):
            UnionizerConfig(union_heuristic="shortest")
        with self.assertRaises(ValidationError):
            UnionizerConfig(max_iterations=-1)
        with self.assertRaises(ValidationError):
            UnionizerConfig(angle_union_sample_ratio=0.0)
        with self.assertRaises(ValidationError):
            UnionizerConfig(angle_union_sample_ratio=0.6)
        with self.assertRaises(ValidationError):
            UnionizerConfig(unknown_option=True)


class AdminizerConfigTests(unittest.TestCase):
    def test_requires_param_name(self):
        with self.assertRaises(ValidationError):
            AdminizerConfig(param_name="", datasource={"file": "a.geojson"})

    def test_datasource_parameters_are_optional_for_injected_sources(self):
        config = AdminizerConfig(param_name="admin")
        self.assertEqual(config.datasource, {})

    def test_accepts_optional_layer_and_field(self):
        config = AdminizerConfig(
            param_name="admin",
            datasource={"file": "a.gpkg", "layer": "regions", "field": "code"},
        )
        self.assertEqual(config.datasource["field"], "code")


class PipelineConfigTests(unittest.TestCase):
    def test_steps_are_parsed_by_type(self):
        document = {
            "processes": [
                {"type": "adminizer", "param_name": "admin", "datasource": {"file": "regions.geojson"}},
                {"type": "unionizer", "union_heuristic": "obtuse", "match_tags": ["name"]},
            ]
        }
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "pipeline.json"
            path.write_text(json.dumps(document), encoding="utf-8")
            config = load_pipeline_config(path)

        self.assertIsInstance(config.processes[0], AdminizerConfig)
        self.assertIsInstance(config.processes[1], UnionizerConfig)
        self.assertEqual(config.processes[1].union_heuristic, UnionHeuristic.OBTUSE)

    def test_unknown_step_type_fails(self):
        with self.assertRaises(ValidationError):
            PipelineConfig.model_validate({"processes": [{"type": "simplifier"}]})

    def test_empty_pipeline_is_allowed(self):
        self.assertEqual(PipelineConfig.model_validate({}).processes, [])


class AppConfigTests(unittest.TestCase):
    def test_environment_overrides(self):
        env = {"POSTPROC_OUTPUT_DIR_NAME": "Out", "POSTPROC_DIAGNOSTICS_ENABLED": "false"}
        with mock.patch.dict(os.environ, env):
            config = AppConfig(_env_file=None)
        self.assertEqual(config.output_dir_name, "Out")
        self.assertFalse(config.diagnostics_enabled)
        self.assertEqual(config.log_dir, "Log")


if __name__ == "__main__":
    unittest.main()
