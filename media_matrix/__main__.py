import sys

from media_matrix.cli import main

sys.exit(main())
