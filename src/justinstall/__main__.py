import sys

from justinstall.cli import main

sys.exit(main())
