import sys

from pkgbump.modules.cli import main

sys.exit(main())
