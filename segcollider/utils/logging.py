import logging

from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class FileLoggingContext:
    """Context manager that copies all log records of a run to a file.

    Everything logged through the root logger inside the context is written to
    `log_file_path` in addition to the existing handlers, unless
    `suppress_stdout` removes them for the duration of the context.
    """

    def __init__(self, log_file_path: Path, suppress_stdout: bool = False):
        """
        Args:
            log_file_path: Path to the run log file. Parent directories are
                created on entry.
            suppress_stdout: If True, detach the other root handlers while inside
                the context.
        """
        self.log_file_path = Path(log_file_path)
        self.suppress_stdout = suppress_stdout
        self.file_handler: logging.FileHandler | None = None
        self.detached_handlers: list[logging.Handler] = []

    def __enter__(self) -> "FileLoggingContext":
        self.log_file_path.parent.mkdir(parents=True, exist_ok=True)
        self.file_handler = logging.FileHandler(self.log_file_path)
        self.file_handler.setFormatter(logging.Formatter(LOG_FORMAT))

        root_logger = logging.getLogger()
        if self.suppress_stdout:
            self.detached_handlers = root_logger.handlers[:]
            for handler in self.detached_handlers:
                root_logger.removeHandler(handler)
        root_logger.addHandler(self.file_handler)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        root_logger = logging.getLogger()
        if self.file_handler in root_logger.handlers:
            root_logger.removeHandler(self.file_handler)

        for handler in self.detached_handlers:
            if handler not in root_logger.handlers:
                root_logger.addHandler(handler)
        self.detached_handlers = []

        if self.file_handler:
            self.file_handler.close()
            self.file_handler = None
