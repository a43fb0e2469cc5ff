import json
import logging
from pathlib import Path

from taskrunner.utils.structured_logging import JSONFormatter, setup_structured_logging


def test_json_formatter_includes_extras() -> None:
    record = logging.LogRecord(
        "taskrunner.runner.waiter", logging.INFO, __file__, 1, "poll %s", (3,), None
    )
    record.task_handle = "task-123"
    entry = json.loads(JSONFormatter().format(record))
    assert entry["message"] == "poll 3"
    assert entry["level"] == "INFO"
    assert entry["component"] == "taskrunner.runner.waiter"
    assert entry["task_handle"] == "task-123"


def test_setup_writes_package_logs_to_run_directory(tmp_path: Path) -> None:
    package_logger = logging.getLogger("taskrunner")
    root_handlers = list(logging.getLogger().handlers)
    try:
        log_path = setup_structured_logging(tmp_path, "run_1", quiet=True)
        logging.getLogger("taskrunner.runner.launcher").info("started %s", "task-1")
        for handler in package_logger.handlers:
            handler.flush()
        lines = log_path.read_text(encoding="utf-8").strip().splitlines()
        assert log_path == tmp_path / "run_1" / "taskrunner.jsonl"
        assert json.loads(lines[-1])["message"] == "started task-1"
        assert logging.getLogger("botocore").level == logging.WARNING
    finally:
        for handler in package_logger.handlers:
            handler.close()
        package_logger.handlers.clear()
        package_logger.propagate = True
        root = logging.getLogger()
        root.handlers[:] = root_handlers
