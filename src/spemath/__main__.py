from spemath.cli import main

main()
