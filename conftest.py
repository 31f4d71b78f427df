import sys
from pathlib import Path

# Run against the source tree (engine tests and their fixtures live under src/)
SRC = Path(__file__).parent / 'src'
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))
