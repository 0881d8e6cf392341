import sys

from named_array.compiler.cli import main

sys.exit(main())
