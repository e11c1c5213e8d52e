"""Tests for the command-line interface and configuration."""

import json
import os

import pytest

from bezierchain.cli import main
from bezierchain.config import AppConfig, load_config, save_default_config

SHARE = "0~0_50~50_100~50_150~0-t150~0_200~n50_250~n50_300~0!10~10_20~20_30~20_40~10"


class TestCli:
    """Tests for CLI commands."""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out

    def test_decode_to_stdout(self, capsys):
        assert main(["decode", SHARE]) == 0

        data = json.loads(capsys.readouterr().out)
        assert len(data["curves"]) == 2
        assert data["curves"][0]["continuity"] == ["c1"]
        assert data["active_curve_index"] == 1

    def test_decode_encode_roundtrip(self, temp_dir, capsys):
        """Test that decode followed by encode reproduces the share string."""
        json_path = os.path.join(temp_dir, "curves.json")

        assert main(["decode", "#" + SHARE, "--out", json_path]) == 0
        capsys.readouterr()

        assert main(["encode", json_path]) == 0
        assert capsys.readouterr().out.strip() == SHARE

    def test_encode_bare_list(self, temp_dir, capsys):
        json_path = os.path.join(temp_dir, "curves.json")
        curve = {
            "segments": [{
                "p0": {"x": 0, "y": 0}, "p1": {"x": -5, "y": 1.25},
                "p2": {"x": 2, "y": 2}, "p3": {"x": 3, "y": 3},
            }],
            "continuity": [],
        }
        with open(json_path, "w", encoding="utf-8") as f:
            json.dump([curve], f)

        assert main(["encode", json_path]) == 0
        assert capsys.readouterr().out.strip() == "0~0_n5~1.3_2~2_3~3"

    def test_info(self, capsys):
        assert main(["info", SHARE]) == 0

        out = capsys.readouterr().out
        assert "Curves: 2" in out
        assert "segments=2" in out
        assert "junctions=t" in out

    def test_malformed_share_fails(self, capsys):
        assert main(["decode", "0~0_1"]) == 1
        assert "Error" in capsys.readouterr().err

    def test_ops_apply(self, temp_dir, capsys):
        """Test applying a delete operation from a JSON file."""
        ops_path = os.path.join(temp_dir, "ops.json")
        out_path = os.path.join(temp_dir, "out", "share.txt")
        with open(ops_path, "w", encoding="utf-8") as f:
            json.dump([{"op": "delete_node", "curve_index": 1, "segment_index": 0, "role": "p3"}], f)

        assert main(["ops", "apply", "--share", SHARE, "--ops", ops_path, "--out", out_path]) == 0

        with open(out_path, encoding="utf-8") as f:
            assert f.read().strip() == SHARE.split("!")[0]

    def test_missing_ops_file(self, temp_dir):
        missing = os.path.join(temp_dir, "nope.json")

        assert main(["ops", "apply", "--share", SHARE, "--ops", missing]) == 1

    def test_trace_to_file(self, temp_dir, capsys):
        trace_path = os.path.join(temp_dir, "trace.log")

        assert main(["decode", SHARE, "--trace", "--trace-file", trace_path]) == 0

        with open(trace_path, encoding="utf-8") as f:
            log = f.read()
        assert "cli_decode" in log
        assert "Parsed 2 curves" in log

        from bezierchain.tracer import configure_tracer
        configure_tracer(enabled=False)

    def test_share_from_file(self, temp_dir, capsys):
        """Test that a share argument naming a file is read from disk."""
        share_path = os.path.join(temp_dir, "link.txt")
        with open(share_path, "w", encoding="utf-8") as f:
            f.write("https://example.com/editor.html#" + SHARE + "\n")

        assert main(["info", share_path]) == 0
        assert "Curves: 2" in capsys.readouterr().out


class TestHitCommand:
    """Tests for the hit command and its configured tolerances."""

    def write_config(self, temp_dir, text):
        path = os.path.join(temp_dir, "config.yaml")
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
        return path

    def test_anchor_hit(self, capsys):
        """Test that a point near a shared anchor reports the earlier segment's p3."""
        assert main(["hit", SHARE, "--x", "151", "--y", "1"]) == 0

        assert capsys.readouterr().out.strip() == "Anchor: curve=0 segment=0 role=p3"

    def test_curve_hit(self, capsys):
        assert main(["hit", SHARE, "--x", "75", "--y", "40"]) == 0

        out = capsys.readouterr().out
        assert out.startswith("Curve: curve=0 segment=0 t=0.50")

    def test_miss(self, capsys):
        assert main(["hit", SHARE, "--x", "75", "--y", "100"]) == 0

        assert capsys.readouterr().out.strip() == "No hit"

    def test_tolerance_from_config(self, temp_dir, capsys):
        """Test that hit_test.tolerance widens the curve hit area."""
        config = self.write_config(temp_dir, "hit_test:\n  tolerance: 70\n")

        assert main(["hit", SHARE, "--x", "75", "--y", "100", "--config", config]) == 0

        assert capsys.readouterr().out.startswith("Curve: curve=0 segment=0")

    def test_anchor_radius_from_config(self, temp_dir, capsys):
        """Test that hit_test.anchor_radius controls anchor picking."""
        config = self.write_config(temp_dir, "hit_test:\n  anchor_radius: 0.5\n")

        assert main(["hit", SHARE, "--x", "151", "--y", "1", "--config", config]) == 0

        assert capsys.readouterr().out.startswith("Curve: curve=0 segment=")

    def test_nearest_samples_from_config(self, temp_dir, capsys):
        """Test that geometry.nearest_samples sets the parameter resolution."""
        config = self.write_config(
            temp_dir, "geometry:\n  nearest_samples: 4\nhit_test:\n  tolerance: 20\n",
        )

        assert main(["hit", SHARE, "--x", "60", "--y", "40"]) == 0
        fine = capsys.readouterr().out
        assert main(["hit", SHARE, "--x", "60", "--y", "40", "--config", config]) == 0
        coarse = capsys.readouterr().out

        # The curve passes through (60, 36) near t=0.4; 4 samples only reach t=0.5
        assert fine.startswith("Curve: curve=0 segment=0")
        assert "t=0.50" not in fine
        assert coarse.startswith("Curve: curve=0 segment=0 t=0.50")


class TestSampleCommand:
    """Tests for polyline export."""

    def test_default_render_samples(self, capsys):
        assert main(["sample", SHARE]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["samples_per_segment"] == 50
        assert len(data["curves"][0]) == 101
        assert len(data["curves"][1]) == 51

    def test_render_samples_from_config(self, temp_dir, capsys):
        """Test that geometry.render_samples sets the steps per segment."""
        config = os.path.join(temp_dir, "config.yaml")
        with open(config, "w", encoding="utf-8") as f:
            f.write("geometry:\n  render_samples: 4\n")
        out_path = os.path.join(temp_dir, "polylines.json")

        assert main(["sample", SHARE, "--config", config, "--out", out_path]) == 0

        with open(out_path, encoding="utf-8") as f:
            data = json.load(f)
        first = data["curves"][0]
        assert len(first) == 9
        assert first[0] == [0, 0]
        assert first[4] == [150, 0]
        assert first[-1] == [300, 0]
        assert len(data["curves"][1]) == 5


class TestConfig:
    """Tests for YAML configuration."""

    def test_defaults(self):
        config = load_config(None)

        assert config == AppConfig()
        assert config.geometry.length_samples == 100

    def test_init_config_roundtrip(self, temp_dir, capsys):
        path = os.path.join(temp_dir, "config.yaml")

        assert main(["init-config", "--out", path]) == 0
        assert load_config(path) == AppConfig()

    def test_partial_override(self, temp_dir):
        path = os.path.join(temp_dir, "config.yaml")
        with open(path, "w", encoding="utf-8") as f:
            f.write("geometry:\n  nearest_samples: 400\nhit_test:\n  bogus: 1\n")

        config = load_config(path)

        assert config.geometry.nearest_samples == 400
        assert config.geometry.length_samples == 100
        assert not hasattr(config.hit_test, "bogus")

    def test_missing_file_uses_defaults(self, temp_dir):
        assert load_config(os.path.join(temp_dir, "absent.yaml")) == AppConfig()

    def test_save_default_config(self, temp_dir):
        path = os.path.join(temp_dir, "defaults.yaml")

        save_default_config(path)

        with open(path, encoding="utf-8") as f:
            text = f.read()
        assert "delay_seconds" in text
        assert "file_path" not in text


@pytest.fixture(autouse=True)
def _reset_tracer():
    yield
    from bezierchain.tracer import configure_tracer
    configure_tracer(enabled=False)
