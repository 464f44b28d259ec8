from .logging import get_logger, setup_logging, silence_libraries

__all__ = ["get_logger", "setup_logging", "silence_libraries"]
