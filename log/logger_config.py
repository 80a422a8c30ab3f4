from loguru import logger
import sys


def configure_logger(config):
    """Replace loguru's default handler with the file, warning-file and console sinks from config."""
    logging_config = config['logging']
    log_file = logging_config['log_file']
    warn_log_file = logging_config['warning_log_file']
    log_level = logging_config['log_level']
    log_rotation = logging_config['log_rotation']

    logger.remove() # Remove default handler
    logger.add(log_file, level=log_level.upper(), enqueue=True, rotation=log_rotation)
    if warn_log_file != log_file:
        logger.add(warn_log_file, level="WARNING", enqueue=True, rotation=log_rotation)
    logger.add(sys.stdout, level="INFO") # Keep console output for INFO+
    return logger
