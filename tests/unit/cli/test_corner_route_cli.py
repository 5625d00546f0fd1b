"""
Unit tests for the corner-route command-line interface.
"""

import argparse
import json

import numpy as np
import pytest
import trimesh

from corner_routing.cli import build_parser, load_policy, main, parse_point
from route_policies import NavigationProfile


def export_box(tmp_path, extents, center, name="scene.stl"):
    mesh = trimesh.creation.box(extents=extents)
    mesh.apply_translation(center)
    path = tmp_path / name
    mesh.export(str(path))
    return str(path)


class TestParsePoint:
    def test_parses_three_floats(self):
        assert parse_point("1,2.5,-3") == (1.0, 2.5, -3.0)

    @pytest.mark.parametrize("text", ["1,2", "1,2,3,4", "a,b,c"])
    def test_rejects_malformed(self, text):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_point(text)

    def test_parser_requires_mesh(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--origin", "0,0,0", "--target", "1,0,0"])


class TestLoadPolicy:
    def test_defaults(self):
        policy = load_policy(None, None)
        assert policy.profile == NavigationProfile.CUSTOM

    def test_profile_override_is_applied(self, tmp_path):
        path = tmp_path / "policy.json"
        path.write_text(json.dumps({"profile": "OPEN_AREAS", "search": {"max_expansions": 500}}))

        policy = load_policy(str(path), "HALLWAYS")

        assert policy.profile == NavigationProfile.HALLWAYS
        assert policy.graph.strategy == "scan"
        assert policy.search.max_expansions == 500

    def test_invalid_policy_raises(self, tmp_path):
        path = tmp_path / "policy.json"
        path.write_text(json.dumps({"schedule": {"update_interval": -1.0}}))
        with pytest.raises(ValueError):
            load_policy(str(path), None)


class TestMain:
    def test_direct_route(self, tmp_path, capsys):
        mesh = export_box(tmp_path, (1.0, 1.0, 1.0), (0.0, 0.0, 50.0))

        code = main(["--mesh", mesh, "--origin", "0,0,0", "--target", "10,0,0"])
        output = json.loads(capsys.readouterr().out)

        assert code == 0
        assert output["success"] is True
        assert output["path"]["direct"] is True
        np.testing.assert_allclose(output["path"]["points"][-1], [10.0, 0.0, 0.0])
        assert "graph" not in output

    def test_sealed_wall_fails_with_graph_report(self, tmp_path, capsys):
        mesh = export_box(tmp_path, (0.2, 200.0, 200.0), (5.0, 0.3, 0.7))

        code = main(["--mesh", mesh, "--origin", "0,0,0", "--target", "10,0,0"])
        output = json.loads(capsys.readouterr().out)

        assert code == 1
        assert output["success"] is False
        assert output["path"] is None
        assert output["graph"]["operation"] == "build_navigation_graph"
        assert output["graph"]["metrics"]["node_count"] > 0

    def test_bad_policy_returns_2(self, tmp_path, capsys):
        mesh = export_box(tmp_path, (1.0, 1.0, 1.0), (0.0, 0.0, 50.0))
        policy = tmp_path / "policy.json"
        policy.write_text(json.dumps({"profile": "NOT_A_PROFILE"}))

        code = main(["--mesh", mesh, "--origin", "0,0,0", "--target", "10,0,0", "--policy", str(policy)])

        assert code == 2
        assert "Error" in capsys.readouterr().err
