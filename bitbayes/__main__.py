import sys

from bitbayes.cli import main

sys.exit(main())
