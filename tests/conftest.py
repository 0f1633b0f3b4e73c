"""Configure test paths."""
import sys
from pathlib import Path

TESTS_DIR = Path(__file__).parent

# Add src/ to path so tests can import the package, and tests/ so they
# can import the shared listing_pages markup builders
sys.path.insert(0, str(TESTS_DIR.parent / "src"))
sys.path.insert(0, str(TESTS_DIR))
