import sys

from seplos_bms.cli.main import main

sys.exit(main())
