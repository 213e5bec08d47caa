"""
Entry point for the QueryUp CLI.

Run with:
    python main.py --help
    python -m src.cli.main --help
    queryup --help            # after pip install -e .
"""
import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from src.cli.main import main

if __name__ == "__main__":
    main()
