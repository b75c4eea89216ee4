from revieworder.cli import main

main()
