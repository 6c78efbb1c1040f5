"""Allow ``python -m episode_browser``."""

import sys

from episode_browser.cli import main

sys.exit(main())
