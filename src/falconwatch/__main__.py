import sys

from falconwatch.cli import main

sys.exit(main())
