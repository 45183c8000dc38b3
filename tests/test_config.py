import dataclasses
import json

import pytest

from fractalmarch.config import RenderConfig, load_config, normalise_config
from fractalmarch.errors import ConfigError


def test_defaults_match_reference_run():
    cfg = RenderConfig()
    assert (cfg.width, cfg.height) == (960, 540)
    assert cfg.frame_count == 240
    assert cfg.fps == 60
    assert cfg.iterations == 100
    assert cfg.frame_name(7) == "output-007.pam"
    assert cfg.frame_pattern == "output-%03d.pam"


def test_pad_width_sorts_lexically():
    assert RenderConfig(frame_count=10).pad_width == 3
    assert RenderConfig(frame_count=1000).pad_width == 3
    assert RenderConfig(frame_count=1001).pad_width == 4
    names = [RenderConfig(frame_count=1001).frame_name(i) for i in (2, 10, 999, 1000)]
    assert names == sorted(names)


def test_config_is_immutable():
    cfg = RenderConfig()
    with pytest.raises(dataclasses.FrozenInstanceError):
        cfg.width = 10


@pytest.mark.parametrize("bad", [
    {"width": 0},
    {"frame_count": -1},
    {"fps": 0},
    {"iterations": 0},
    {"renderer": "gpu"},
    {"frame_format": "bmp"},
    {"encoder": "gstreamer"},
    {"frame_workers": 0},
])
def test_invalid_values_rejected(bad):
    with pytest.raises(ConfigError):
        normalise_config(bad)


def test_unknown_and_malformed_fields_rejected():
    with pytest.raises(ConfigError):
        normalise_config({"zoom": 3})
    with pytest.raises(ConfigError):
        normalise_config({"width": "wide"})


def test_normalise_coerces_types():
    cfg = normalise_config({"width": "320", "height": 180.0, "frame_format": "PNG", "skip_existing": 1})
    assert cfg.width == 320
    assert cfg.height == 180
    assert cfg.frame_format == "png"
    assert cfg.skip_existing is True


def test_replace_ignores_none():
    cfg = RenderConfig().replace(width=64, height=None)
    assert cfg.width == 64
    assert cfg.height == 540
    with pytest.raises(ConfigError):
        RenderConfig().replace(width=-3)


def test_load_config_from_json(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"width": 32, "height": 18, "fps": 30}))
    cfg = normalise_config(load_config(str(path)))
    assert (cfg.width, cfg.height, cfg.fps) == (32, 18, 30)
    assert load_config(None) == RenderConfig().to_dict()


def test_load_config_errors(tmp_path):
    path = tmp_path / "list.json"
    path.write_text("[1, 2]")
    with pytest.raises(ConfigError):
        load_config(str(path))
    with pytest.raises(ConfigError):
        load_config(str(tmp_path / "missing.json"))
