"""Allow ``python -m policysigner``."""

import sys

from policysigner.cli import main

if __name__ == "__main__":
    sys.exit(main())
