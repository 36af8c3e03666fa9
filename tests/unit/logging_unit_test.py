import logging
from pathlib import Path

from singleton_registry.utils.logging import configure_logging, get_logger


def test_configure_logging_writes_to_file(tmp_path: Path):
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    root.handlers = []
    try:
        configure_logging(level="info", log_to_file=True, log_dir=str(tmp_path / "logs"))
        get_logger("singleton_registry.test").info("registry ready")
        for handler in root.handlers:
            handler.flush()
        text = (tmp_path / "logs" / "app.log").read_text(encoding="utf-8")
        assert "INFO [singleton_registry.test] registry ready" in text
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = saved_handlers
        root.setLevel(saved_level)
