import sys

from mandelview.cli import main

sys.exit(main())
