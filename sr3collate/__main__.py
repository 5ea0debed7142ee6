"""Allow ``python -m sr3collate``."""
import sys

from .cli import main

sys.exit(main())
