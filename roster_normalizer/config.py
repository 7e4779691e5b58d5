import logging
import os

from dotenv import load_dotenv

load_dotenv()

DEBUG = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}

# Root-level cost records are keyed by these type ids; display names such as
# " PL" are not stable between game system revisions.
POWER_LEVEL_COST_TYPE = os.getenv("ROSTER_POWER_LEVEL_COST_TYPE", "e356-c769-5920-6e14")
COMMAND_POINTS_COST_TYPE = os.getenv("ROSTER_COMMAND_POINTS_COST_TYPE", "2d3b-b544-ad49-fb75")
POINTS_COST_TYPE = os.getenv("ROSTER_POINTS_COST_TYPE", "points")

POINTS_COST_NAME = os.getenv("ROSTER_POINTS_COST_NAME", "pts")

if DEBUG:
    logging.getLogger("roster_normalizer").setLevel(logging.DEBUG)
