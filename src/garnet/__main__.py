"""Allow `python -m garnet`."""

import sys

from garnet.cli import main

if __name__ == "__main__":
    sys.exit(main())
