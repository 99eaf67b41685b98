import sys

from git_wt.cli.main import main

sys.exit(main())
