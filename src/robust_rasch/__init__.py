import logging
import sys

# Console handler shared by every module logger (they all propagate to root)
console_handler = logging.StreamHandler(sys.stdout)
console_handler.setLevel(logging.DEBUG)
formatter = logging.Formatter(
    "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
console_handler.setFormatter(formatter)

root_logger = logging.getLogger()
root_logger.setLevel(logging.INFO)
root_logger.addHandler(console_handler)

# numba logs every compilation pass at DEBUG
logging.getLogger("numba").setLevel(logging.WARNING)
