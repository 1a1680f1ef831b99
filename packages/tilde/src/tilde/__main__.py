from tilde.cli import main

main()
