from lutmerge.cli import main

raise SystemExit(main())
