"""Tests for ImportConfig defaults, normalization and serialization."""

from __future__ import annotations

import json
import unittest
from dataclasses import replace
from pathlib import Path

import numpy as np

from bluelake_importer.models.config import DEFAULT_TARGET_RATE_HZ, ImportConfig


class TestImportConfig(unittest.TestCase):
    def test_bluelake_defaults(self) -> None:
        cfg = ImportConfig(path="run.h5")
        self.assertFalse(cfg.downsample)
        self.assertEqual(cfg.target_rate_hz, DEFAULT_TARGET_RATE_HZ)
        self.assertEqual(cfg.format_attribute, "Bluelake version")
        self.assertEqual(cfg.channel_group, "Force HF")
        self.assertEqual(cfg.required_channels, ("Force 1x", "Force 2x"))
        self.assertEqual(cfg.primary_channel, "Force 1x")
        self.assertEqual(cfg.channel_path("Force 2x"), "Force HF/Force 2x")
        self.assertEqual(cfg.marker_color, "#0000FF")
        self.assertAlmostEqual(cfg.marker_opacity, 0.2)

    def test_normalizes_path_and_channel_lists(self) -> None:
        cfg = ImportConfig(
            path=Path("/data") / "run.h5",
            required_channels=["Force 2x", "Force 1x"],
            auxiliary_channels="Trap position/1Y",
        )
        self.assertEqual(cfg.path, str(Path("/data") / "run.h5"))
        self.assertEqual(cfg.source_name, "run.h5")
        self.assertEqual(cfg.required_channels, ("Force 2x", "Force 1x"))
        self.assertEqual(cfg.primary_channel, "Force 2x")
        self.assertEqual(cfg.auxiliary_channels, ("Trap position/1Y",))

    def test_roundtrip_through_json(self) -> None:
        cfg = ImportConfig(path="run.h5", downsample=True, target_rate_hz=500.0, auxiliary_channels=())
        d = json.loads(json.dumps(cfg.to_dict()))
        self.assertEqual(d["required_channels"], ["Force 1x", "Force 2x"])
        self.assertEqual(ImportConfig.from_dict(d), cfg)

    def test_validate_rejects_misuse(self) -> None:
        ImportConfig(path="run.h5").validate()
        for bad in (
            dict(required_channels=()),
            dict(target_rate_hz=float("nan")),
            dict(target_rate_hz="fast"),
            dict(marker_opacity=1.5),
        ):
            with self.subTest(bad=bad):
                with self.assertRaises(ValueError):
                    replace(ImportConfig(path="run.h5"), **bad).validate()

    def test_numpy_rate_is_accepted(self) -> None:
        ImportConfig(path="run.h5", target_rate_hz=np.float32(500.0)).validate()
        ImportConfig(path="run.h5", target_rate_hz=np.int64(500)).validate()

    def test_frozen(self) -> None:
        cfg = ImportConfig(path="run.h5")
        with self.assertRaises(Exception):
            cfg.downsample = True  # type: ignore[misc]


if __name__ == "__main__":
    unittest.main()
