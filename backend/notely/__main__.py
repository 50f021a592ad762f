from notely.main import main

main()
