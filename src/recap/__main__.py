from recap._cli import main

raise SystemExit(main())
