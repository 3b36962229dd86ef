from __future__ import annotations

import dataclasses

import pytest
from domain.model import UPLOAD_INTERVAL_S, AgentConfig, Report, UploadWindow


def test_window_floors_to_ten_second_bucket():
    w = UploadWindow.for_start(12345)
    assert (w.from_, w.until) == (12340, 12350)


@pytest.mark.parametrize(
    "start, expected",
    [(12340.0, 12340), (12340.9, 12340), (12349.999, 12340), (12350.0, 12350)],
)
def test_window_bucket_edges(start, expected):
    w = UploadWindow.for_start(start)
    assert w.from_ == expected
    assert w.until - w.from_ == UPLOAD_INTERVAL_S


def test_upload_interval_matches_window_width():
    assert UPLOAD_INTERVAL_S == 10


def test_config_is_immutable():
    tags = {"env": "prod"}
    cfg = AgentConfig("http://x", "svc", tags=tags, blocklist={"libc"})  # type: ignore[arg-type]
    tags["env"] = "dev"
    assert cfg.tags["env"] == "prod"
    assert cfg.blocklist == frozenset({"libc"})
    with pytest.raises(TypeError):
        cfg.tags["env"] = "x"  # type: ignore[index]
    with pytest.raises(dataclasses.FrozenInstanceError):
        cfg.sample_rate = 1  # type: ignore[misc]


def test_report_is_empty():
    assert Report(start_time=0.0, sample_rate=100).is_empty()
    assert Report(start_time=0.0, sample_rate=100, samples={("a",): 0}).is_empty()
    assert not Report(start_time=0.0, sample_rate=100, samples={("a",): 1}).is_empty()
