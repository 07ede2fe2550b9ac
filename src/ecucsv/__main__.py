"""Allow `python -m ecucsv`."""

import sys

from ecucsv.cli import main


if __name__ == "__main__":
    sys.exit(main())
