from slim2erb.cli.main import main

main()
