import logging
import sys

from .config import LOG_LEVEL, LOG_NAMESPACES


class NamespaceFilter(logging.Filter):
    def __init__(self, allowed_namespaces=None):
        super().__init__()
        self.allowed_namespaces = allowed_namespaces if allowed_namespaces is not None else []

    def filter(self, record):
        if not self.allowed_namespaces:
            return True # If no namespaces are specified, allow all records
        # Allow record if its name starts with any of the allowed namespaces
        return any(record.name.startswith(ns) for ns in self.allowed_namespaces)

log_formatter = logging.Formatter(
    fmt="%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

app_logger = logging.getLogger("pos_insights")
app_logger.setLevel(LOG_LEVEL)

console_handler = logging.StreamHandler(sys.stdout)
console_handler.setFormatter(log_formatter)

# --- Namespace-based Filter ---
# Driven by LOG_NAMESPACES, e.g. "pos_insights.features.reports,pos_insights.main".
# An empty list lets every record through.
console_handler.addFilter(NamespaceFilter(LOG_NAMESPACES))

if not any(isinstance(h, logging.StreamHandler) for h in app_logger.handlers):
    app_logger.addHandler(console_handler)

# --- Namespace-specific logging level configuration examples ---
# To see per sub-query debug output from the dashboard aggregator:
# logging.getLogger("pos_insights.features.reports").setLevel(logging.DEBUG)

# Note: modules use logging.getLogger(__name__), which creates loggers like
# "pos_insights.features.reports.service". These inherit levels from their
# parents or from the application logger ("pos_insights").

# To see the commands pymongo sends, enable its command logger:
# logging.getLogger("pymongo.command").setLevel(logging.DEBUG)
