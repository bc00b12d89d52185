from copyfiles.cli import main

main()
