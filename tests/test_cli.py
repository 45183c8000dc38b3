import json
import os
import signal
import threading

import pytest

from fractalmarch.cli import EXIT_ENCODE_FAILED, EXIT_FAILED, EXIT_OK, main
from fractalmarch.util.logging_setup import get_logger


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    yield tmp_path
    logger = get_logger()
    for h in list(logger.handlers):
        logger.removeHandler(h)


def test_probe_prints_pixel(workdir, capsys):
    rc = main(["--log-file", "", "probe", "--width", "96", "--height", "54", "--iterations", "20"])
    assert rc == EXIT_OK
    out = capsys.readouterr().out
    assert "Before tanh" in out
    assert "After tanh" in out
    assert ", 255)" in out


def test_render_writes_frames_and_manifest(workdir):
    rc = main([
        "--log-file", "", "--renderer", "numpy", "render",
        "--width", "12", "--height", "6", "--frames", "3", "--iterations", "10", "--no-progress",
    ])
    assert rc == EXIT_OK
    assert sorted(os.listdir("frames")) == ["output-000.pam", "output-001.pam", "output-002.pam"]
    with open(os.path.join("artifacts", "run.json"), encoding="utf-8") as f:
        manifest = json.load(f)
    assert manifest["config"]["width"] == 12
    assert manifest["renderer"]["resolved"] == "numpy"
    assert manifest["result"]["frames_written"] == 3


def test_run_keeps_frames_when_encoder_missing(workdir):
    (workdir / "cfg.json").write_text(json.dumps({"ffmpeg_bin": str(workdir / "no-ffmpeg"), "renderer": "numpy"}))
    rc = main([
        "--config", "cfg.json", "--log-file", "", "run",
        "--width", "8", "--height", "4", "--frames", "2", "--iterations", "5", "--no-progress",
    ])
    assert rc == EXIT_ENCODE_FAILED
    assert sorted(os.listdir("frames")) == ["output-000.pam", "output-001.pam"]


def test_bad_config_exit_code(workdir):
    (workdir / "cfg.json").write_text(json.dumps({"width": -1}))
    assert main(["--config", "cfg.json", "--log-file", "", "probe"]) == EXIT_FAILED


def test_write_failure_exit_code(workdir):
    (workdir / "frames").write_text("file in the way")
    rc = main(["--log-file", "", "--renderer", "numpy", "render", "--width", "4", "--height", "2",
               "--frames", "1", "--iterations", "2", "--no-progress"])
    assert rc == EXIT_FAILED


def test_render_from_non_main_thread(workdir):
    handler = signal.getsignal(signal.SIGINT)
    outcome = {}

    def _run():
        try:
            outcome["rc"] = main(["--log-file", "", "--renderer", "numpy", "render", "--width", "4", "--height", "2",
                                  "--frames", "2", "--iterations", "2", "--no-progress"])
        except Exception as e:
            outcome["error"] = e

    worker = threading.Thread(target=_run)
    worker.start()
    worker.join(timeout=120)
    assert not worker.is_alive()
    assert "error" not in outcome
    assert outcome["rc"] == EXIT_OK
    assert sorted(os.listdir("frames")) == ["output-000.pam", "output-001.pam"]
    assert signal.getsignal(signal.SIGINT) is handler
