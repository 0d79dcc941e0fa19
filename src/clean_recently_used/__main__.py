"""Allow ``python -m clean_recently_used``."""

import sys

from clean_recently_used.cli import main

sys.exit(main())
