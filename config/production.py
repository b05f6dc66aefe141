import os

from .config import *  # noqa: F401,F403

DEBUG = False
TESTING = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
