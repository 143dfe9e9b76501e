"""deepthink observability: structured logging to stderr or a JSONL file.

    setup_logging(ObservabilityConfig.from_env())
    logger = get_logger(__name__)
    logger.debug("centrality.converged", measure="pagerank", iterations=12)
"""

from deepthink.observability.config import ObservabilityConfig
from deepthink.observability.logging import get_logger, setup_logging, shutdown_logging

__all__ = [
    "ObservabilityConfig",
    "get_logger",
    "setup_logging",
    "shutdown_logging",
]
