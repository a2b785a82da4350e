import sys

from sboxlab.cli import main

sys.exit(main())
