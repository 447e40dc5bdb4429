"""Console logging setup."""

import logging

from yield_vault.utils import setup_console_logging


def test_log_file(tmp_path, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "info")
    log_file = tmp_path / "logs" / "simulation.log"
    root = setup_console_logging(log_file=log_file)
    try:
        logging.getLogger("yield_vault.test").info("Hello %s", "vault")
        for handler in root.handlers:
            handler.flush()
        assert "Hello vault" in log_file.read_text()
        assert logging.getLogger("urllib3.connectionpool").level == logging.WARNING
    finally:
        for handler in list(root.handlers):
            if isinstance(handler, logging.FileHandler):
                root.removeHandler(handler)
                handler.close()
