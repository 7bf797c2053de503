import logging
import os

DEFAULT_FORBIDDEN_LOGS = ["findfont", "pydevd", "Locator"]


class CustomLogFilter(logging.Filter):
    def __init__(self, forbidden_substrings=None):
        super().__init__()
        # forbidden_substrings is a list of strings that, if found in a log message,
        # will cause the message to be filtered out.
        self.forbidden_substrings = forbidden_substrings or []

    def filter(self, record):
        message = record.getMessage().lower()
        # Return False (filter out) if any forbidden substring is found in the log message.
        for substring in self.forbidden_substrings:
            if substring.lower() in message:
                return False
        return True


def setup_logging(output_dir: str = "output/", forbidden_logs=None):
    logger = logging.getLogger()

    # Remove any existing handlers to prevent duplication
    if logger.hasHandlers():
        logger.handlers.clear()

    logging.getLogger('matplotlib').setLevel(logging.WARNING)
    logger.setLevel(logging.DEBUG)

    formatter = logging.Formatter('%(asctime)s - %(filename)s - %(levelname)s - %(message)s')
    log_filter = CustomLogFilter(DEFAULT_FORBIDDEN_LOGS if forbidden_logs is None else forbidden_logs)

    # Console handler for INFO level and above
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(log_filter)
    logger.addHandler(console_handler)

    os.makedirs(output_dir, exist_ok=True)

    # File handler for DEBUG level and above
    file_handler = logging.FileHandler(os.path.join(output_dir, "debug.log"))
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    file_handler.addFilter(log_filter)
    logger.addHandler(file_handler)

    logging.info("Logging initiated")
