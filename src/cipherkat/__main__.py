import sys

from cipherkat.cli import main

sys.exit(main())
