import sys

from xattrbench.cli import main

sys.exit(main())
