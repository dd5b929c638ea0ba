import sys

from xrpl_airgap.cli import main

sys.exit(main())
