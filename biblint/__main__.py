"""Allow running the linter as a module: python -m biblint"""

from .cli import main

if __name__ == "__main__":
    import sys
    sys.exit(main())
