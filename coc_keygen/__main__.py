from coc_keygen.app import main

raise SystemExit(main())
