from DeskEye.app import main

raise SystemExit(main())
