from incremental_build.cli import main

raise SystemExit(main())
