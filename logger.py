# logger.py
import logging
import sys

LOG_FILE = "/var/log/tui-installer.log"
FALLBACK_LOG_FILE = "/tmp/tui-installer.log"

def setup_logger(log_file: str = LOG_FILE) -> logging.Logger:
    logger = logging.getLogger("tui_installer")
    logger.setLevel(logging.DEBUG)

    fmt = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

    if logger.handlers:
        return logger

    # Live media usually mounts /var/log read-only for non-root users
    try:
        fh = logging.FileHandler(log_file)
    except OSError:
        fh = logging.FileHandler(FALLBACK_LOG_FILE)
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(fmt)

    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(logging.WARNING)
    sh.setFormatter(fmt)

    logger.addHandler(fh)
    logger.addHandler(sh)
    return logger

log = setup_logger()
