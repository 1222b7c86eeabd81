from ticket_toolbox.cli import main

raise SystemExit(main())
