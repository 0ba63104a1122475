import sys

from ans_scraper.cli import main


sys.exit(main())
