import sys

from medicita.cli import main

sys.exit(main())
