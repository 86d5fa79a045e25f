import sys

from page_arranger.cli import main

sys.exit(main())
