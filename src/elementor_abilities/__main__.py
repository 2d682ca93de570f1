"""Allow ``python -m elementor_abilities``."""

import sys

from elementor_abilities.cli import main

if __name__ == "__main__":
    sys.exit(main())
