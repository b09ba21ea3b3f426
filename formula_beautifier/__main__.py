import sys

from formula_beautifier.cli import main

sys.exit(main())
