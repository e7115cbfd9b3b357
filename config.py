# config.py
import os

# ======= Encoding =======
# "dense": one occupancy literal per grid cell per placement.
# "sparse": occupancy literals only for the cells a placement covers.
OCCUPANCY          = os.getenv("PS_OCCUPANCY", "dense").strip().lower()
ALLOW_REFLECTIONS  = int(os.getenv("PS_ALLOW_REFLECTIONS", "0")) != 0
MAX_PLACEMENTS     = int(os.getenv("PS_MAX_PLACEMENTS", "200000"))
MAX_CLAUSES        = int(os.getenv("PS_MAX_CLAUSES", "5000000"))

# ======= CP-SAT backend =======
WORKERS       = int(os.getenv("PS_WORKERS", "1"))
RANDOM_SEED   = int(os.getenv("PS_RANDOM_SEED", "0"))
MAX_MEMORY_MB = int(os.getenv("PS_MAX_MEMORY_MB", "2048"))
# 0 leaves the search unbounded; wrap with the isolated runner for a hard stop.
MAX_SECONDS   = float(os.getenv("PS_MAX_SECONDS", "0"))

# ======= Process isolation (service) =======
ISOLATE          = int(os.getenv("PS_ISOLATE", "0")) != 0
ISOLATE_SECONDS  = float(os.getenv("PS_ISOLATE_SECONDS", "60"))

# ======= Output names =======
COORDS_OUT     = os.getenv("PS_COORDS_OUT", "coords.txt")
LAYOUT_HTML    = os.getenv("PS_LAYOUT_HTML", "layout_view.html")
WRITE_OUTPUTS  = int(os.getenv("PS_WRITE_OUTPUTS", "0")) != 0

# ======= Logging =======
LOG_FILE = os.getenv("PS_LOG_FILE", "")

class CFG:
    OCCUPANCY         = OCCUPANCY
    ALLOW_REFLECTIONS = ALLOW_REFLECTIONS
    MAX_PLACEMENTS    = MAX_PLACEMENTS
    MAX_CLAUSES       = MAX_CLAUSES

    WORKERS       = WORKERS
    RANDOM_SEED   = RANDOM_SEED
    MAX_MEMORY_MB = MAX_MEMORY_MB
    MAX_SECONDS   = MAX_SECONDS

    ISOLATE         = ISOLATE
    ISOLATE_SECONDS = ISOLATE_SECONDS

    COORDS_OUT    = COORDS_OUT
    LAYOUT_HTML   = LAYOUT_HTML
    WRITE_OUTPUTS = WRITE_OUTPUTS

    LOG_FILE = LOG_FILE

__all__ = ["CFG"]
