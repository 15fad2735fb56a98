"""Allow ``python -m musiclib_native``."""

import sys

from musiclib_native.ui.cli.cli import main

if __name__ == "__main__":
    sys.exit(main())
