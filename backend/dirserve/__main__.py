from dirserve.cli import main

raise SystemExit(main())
