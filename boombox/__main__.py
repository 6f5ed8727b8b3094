import sys

from boombox.cli import main

sys.exit(main())
