import sys

from cardprice.cli import main

sys.exit(main())
