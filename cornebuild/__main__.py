"""Allow running as ``python -m cornebuild``."""

import sys

from cornebuild.cli import main


if __name__ == "__main__":
    sys.exit(main())
