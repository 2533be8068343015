"""Allow `python -m wqkit`."""

from wqkit.cli import main

raise SystemExit(main())
