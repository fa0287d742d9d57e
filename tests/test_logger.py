"""Tests for the engine logger wrapper."""

import logging

import pytest

from media_matrix.utils.logger import EngineLogger, with_context


class TestEngineLogger:
    """Context formatting and warning/error tracking."""

    def test_with_context(self):
        assert with_context("Scored", total=2.5, version=1) == "Scored [total=2.5 version=1]"
        assert with_context("Plain") == "Plain"

    def test_tracks_warnings_and_errors(self, caplog):
        logger = EngineLogger(name="media_matrix.test_tracking")
        with caplog.at_level(logging.WARNING, logger="media_matrix.test_tracking"):
            logger.warning("Range issue", detail="cpm")
            logger.error("Bad file", exception=ValueError("boom"))

        summary = logger.summary()
        assert summary["warnings"] == 1
        assert summary["errors"] == 1
        assert summary["events"][1]["exception"] == "boom"
        assert "Range issue [detail=cpm]" in caplog.text
        assert "Bad file: boom" in caplog.text

        logger.reset()
        assert logger.summary()["errors"] == 0

    def test_timed_reraises(self):
        logger = EngineLogger(name="media_matrix.test_timing")
        with pytest.raises(RuntimeError):
            with logger.timed("scoring", file="answers.yaml"):
                raise RuntimeError("failed")
        assert logger.errors[0].data["file"] == "answers.yaml"
        assert "seconds" in logger.errors[0].data

    def test_timed_success_is_not_tracked(self):
        logger = EngineLogger(name="media_matrix.test_timing_ok")
        with logger.timed("scoring"):
            pass
        assert logger.events == []

    def test_file_handler(self, tmp_path):
        logger = EngineLogger(name="media_matrix.test_file", log_file="engine.log", log_dir=tmp_path)
        try:
            logger.info("hello", category="portal_blog")
            for handler in logger.logger.handlers:
                handler.flush()
            assert "hello [category=portal_blog]" in (tmp_path / "engine.log").read_text(encoding="utf-8")
        finally:
            for handler in list(logger.logger.handlers):
                handler.close()
                logger.logger.removeHandler(handler)
