from blogify.server import main

main()
