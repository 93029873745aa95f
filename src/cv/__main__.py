from cv.cli import main

main()
