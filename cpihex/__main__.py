import sys

from cpihex.scripts.cpi2hex import main

sys.exit(main())
