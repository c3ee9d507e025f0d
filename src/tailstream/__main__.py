"""Allow running tailstream as ``python -m tailstream``."""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
