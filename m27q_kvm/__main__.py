"""`python -m m27q_kvm` entrypoint."""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
