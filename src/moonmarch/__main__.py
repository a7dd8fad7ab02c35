import sys

from moonmarch.cli import main

sys.exit(main())
