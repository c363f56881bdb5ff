"""
Test suite for the storyboard scene tools.
"""

import sys
import os

# Add parent directory to path so tests can import config, main and storyboard
_backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _backend_dir not in sys.path:
    sys.path.insert(0, _backend_dir)
