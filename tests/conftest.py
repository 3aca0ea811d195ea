import sys
from pathlib import Path

import matplotlib

# Render to files only; tests never open windows.
matplotlib.use("Agg")

# Ensure project root is on sys.path so `waypoint_routing` and `experiments` import.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
