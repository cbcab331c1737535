"""Test package for probmsa."""

import sys
from pathlib import Path

# Make the probmsa package importable without installing it
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))
