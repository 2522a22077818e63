"""Allow ``python -m mindlayout``."""

import sys

from .cli import main

sys.exit(main())
