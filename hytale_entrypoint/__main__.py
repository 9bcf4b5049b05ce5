import sys

from hytale_entrypoint.main import main

sys.exit(main())
