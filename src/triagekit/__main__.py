from triagekit.cli.main import main

main()
