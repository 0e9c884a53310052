from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Dict, List

import geopandas as gpd
import networkx as nx
from shapely.geometry import LineString


def _line_strings(gdf: Any) -> List[LineString]:
    lines: List[LineString] = []
    for geom in gdf.geometry:
        if geom is None or geom.is_empty:
            continue
        if isinstance(geom, LineString):
            lines.append(geom)
        elif geom.geom_type == "MultiLineString":
            lines.extend(part for part in geom.geoms if not part.is_empty)
    return lines


def build_graph(lines: List[LineString], precision: int = 6) -> nx.MultiGraph:
    graph = nx.MultiGraph()
    for line in lines:
        start = (round(line.coords[0][0], precision), round(line.coords[0][1], precision))
        end = (round(line.coords[-1][0], precision), round(line.coords[-1][1], precision))
        graph.add_edge(start, end, weight=float(line.length))
    return graph


def evaluate(input_gdf: Any, output_gdf: Any, thresholds: Dict[str, Any]) -> Dict[str, Any]:
    input_lines = _line_strings(input_gdf)
    output_lines = _line_strings(output_gdf)
    graph = build_graph(output_lines)

    input_length = float(sum(line.length for line in input_lines))
    output_length = float(sum(line.length for line in output_lines))
    length_change_rate = 0.0 if input_length == 0 else abs(output_length - input_length) / input_length
    reduction_ratio = 0.0 if not input_lines else 1.0 - len(output_lines) / len(input_lines)

    metrics = {
        "input_features": int(len(input_gdf)),
        "output_features": int(len(output_gdf)),
        "input_lines": len(input_lines),
        "output_lines": len(output_lines),
        "line_reduction_ratio": reduction_ratio,
        "component_count": nx.number_connected_components(graph) if graph.number_of_nodes() else 0,
        "pass_through_count": sum(1 for _, degree in graph.degree() if degree == 2),
        "length_change_rate": length_change_rate,
    }

    checks = {
        "min_line_reduction_ratio": metrics["line_reduction_ratio"] >= float(thresholds.get("min_line_reduction_ratio", 0.0)),
        "max_pass_through_count": metrics["pass_through_count"] <= int(thresholds.get("max_pass_through_count", 999999)),
        "max_length_change_rate": metrics["length_change_rate"] <= float(thresholds.get("max_length_change_rate", 1e-6)),
    }

    return {"metrics": metrics, "checks": checks, "passed": all(checks.values())}


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Evaluate line-merge results against pass/fail gates.")
    parser.add_argument("--input", required=True, help="Layer before post-processing (GeoJSON/GeoPackage/SHP)")
    parser.add_argument("--output", required=True, help="Layer after post-processing")
    parser.add_argument("--thresholds", required=False, help="JSON file for threshold configuration")
    parser.add_argument("--report", required=False, help="Optional report JSON path")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    input_gdf = gpd.read_file(args.input)
    output_gdf = gpd.read_file(args.output)
    thresholds = json.loads(Path(args.thresholds).read_text(encoding="utf-8")) if args.thresholds else {}

    result = evaluate(input_gdf, output_gdf, thresholds)
    print(json.dumps(result, ensure_ascii=False, indent=2))

    if args.report:
        Path(args.report).write_text(json.dumps(result, ensure_ascii=False, indent=2), encoding="utf-8")

    return 0 if result["passed"] else 1


if __name__ == "__main__":
    raise SystemExit(main())
