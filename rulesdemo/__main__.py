from rulesdemo.cli import main

raise SystemExit(main())
