from balscan.cli import main

raise SystemExit(main())
