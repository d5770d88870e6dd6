# config.py
import os

# ======= Engine selection =======
ENGINE               = os.getenv("PK_ENGINE", "backtrack").strip().lower()

# ======= Backtracking pruning knobs =======
# Identical instances of one shape are interchangeable; order them.
SYMMETRY_BREAK       = int(os.getenv("PK_SYMMETRY_BREAK", "1")) != 0
# Coverage pruning runs only once slack (free cells minus remaining demand)
# drops to this many cells.  Negative disables it.
PRUNE_SLACK          = int(os.getenv("PK_PRUNE_SLACK", "64"))

# ======= CP-SAT cross-check =======
CP_SAT_SECONDS       = float(os.getenv("PK_CP_SAT_SECONDS", "30"))
WORKERS              = int(os.getenv("PK_WORKERS", "1"))
MAX_MEMORY_MB        = int(os.getenv("PK_MAX_MEMORY_MB", "2048"))
RANDOM_SEED          = int(os.getenv("PK_RANDOM_SEED", "0"))

# ======= Per-region deadline (seconds, 0 = none) =======
REGION_TIMEOUT       = float(os.getenv("PK_REGION_TIMEOUT", "0"))

# ======= Output names =======
VERDICTS_OUT = os.getenv("PK_VERDICTS_OUT", "verdicts.txt")
LAYOUT_HTML  = os.getenv("PK_LAYOUT_HTML", "layout_view.html")

# ======= Logging =======
LOG_LEVEL    = os.getenv("PK_LOG_LEVEL", "INFO").strip().upper()

class CFG:
    ENGINE = ENGINE

    SYMMETRY_BREAK = SYMMETRY_BREAK
    PRUNE_SLACK    = PRUNE_SLACK

    CP_SAT_SECONDS = CP_SAT_SECONDS
    WORKERS        = WORKERS
    MAX_MEMORY_MB  = MAX_MEMORY_MB
    RANDOM_SEED    = RANDOM_SEED

    REGION_TIMEOUT = REGION_TIMEOUT

    VERDICTS_OUT = VERDICTS_OUT
    LAYOUT_HTML  = LAYOUT_HTML

    LOG_LEVEL = LOG_LEVEL

ENGINES = ("backtrack", "cp_sat")

__all__ = ["CFG", "ENGINES"]
