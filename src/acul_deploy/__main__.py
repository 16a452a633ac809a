from acul_deploy.cli import main

raise SystemExit(main())
