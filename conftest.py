"""
Pytest configuration for the tilesr test suite.

Puts the project root on the Python path so tests can import tilesr.*
and tests.fixtures.* without an install.
"""

import sys
from pathlib import Path

# Add the project root to the Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))
