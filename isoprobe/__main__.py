import sys

from isoprobe.main import main

sys.exit(main())
